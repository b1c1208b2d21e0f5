from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Set

COMBO_WINDOW_TICKS = 180
COMBO_BONUS_PER_STEP = 10
SCORE_PER_LEVEL = 2000
SURVIVOR_MS = 300_000
COLLECTOR_PICKUPS = 50
MARKSMAN_ACCURACY = 90


@dataclass
class RunStats:
    score: int = 0
    kills: int = 0
    shots: int = 0
    hits: int = 0
    combo: int = 0
    max_combo: int = 0
    combo_timer: int = 0
    frames: int = 0
    elapsed_ms: float = 0.0
    powerups_collected: int = 0
    level: int = 1

    @property
    def accuracy(self) -> int:
        if self.shots <= 0:
            return 0
        return round(self.hits / self.shots * 100)

    def register_kill(self, base_score: int) -> int:
        """Credit a combo kill and return the points it was worth."""
        self.kills += 1
        self.combo += 1
        self.max_combo = max(self.max_combo, self.combo)
        self.combo_timer = COMBO_WINDOW_TICKS
        points = base_score
        if self.combo > 1:
            points += self.combo * COMBO_BONUS_PER_STEP
        self.score += points
        return points

    def credit_kill(self, base_score: int) -> int:
        # kill credit without touching the combo chain
        self.kills += 1
        self.score += base_score
        return base_score

    def reset_combo(self) -> None:
        self.combo = 0
        self.combo_timer = 0

    def tick_combo(self) -> bool:
        """Count the combo window down one tick. True when the combo lapsed."""
        if self.combo_timer <= 0:
            return False
        self.combo_timer -= 1
        if self.combo_timer <= 0:
            self.reset_combo()
            return True
        return False

    def level_for_score(self) -> int:
        return self.score // SCORE_PER_LEVEL + 1


class Achievements:
    """Achievement keys unlocked during one run."""

    def __init__(self) -> None:
        self._unlocked: Set[str] = set()
        self._order: List[str] = []

    def unlock(self, key: str) -> bool:
        if key in self._unlocked:
            return False
        self._unlocked.add(key)
        self._order.append(key)
        return True

    def clear(self) -> None:
        self._unlocked.clear()
        self._order.clear()

    def as_list(self) -> List[str]:
        return list(self._order)

    def __contains__(self, key: object) -> bool:
        return key in self._unlocked

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._order))

    def __len__(self) -> int:
        return len(self._order)


def progress_achievements(stats: RunStats) -> List[str]:
    """Keys whose in-run conditions currently hold."""
    keys: List[str] = []
    if stats.kills >= 1:
        keys.append("first_kill")
    if stats.combo >= 10:
        keys.append("combo10")
    if stats.combo >= 50:
        keys.append("combo50")
    if stats.powerups_collected >= COLLECTOR_PICKUPS:
        keys.append("collector")
    return keys


def final_achievements(stats: RunStats) -> List[str]:
    keys: List[str] = []
    if stats.elapsed_ms >= SURVIVOR_MS:
        keys.append("survivor")
    if stats.accuracy >= MARKSMAN_ACCURACY:
        keys.append("marksman")
    return keys
