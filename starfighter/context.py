from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .audio import AudioCues, NullAudio
from .config import GameplayConfig, SpawnConfig
from .content import DifficultyPreset
from .controls import InputState
from .effects import ActiveEffects
from .logger import get_logger
from .scoring import Achievements, RunStats
from .skills import SkillBook

logger = get_logger(__name__)


@dataclass
class WaveState:
    wave: int = 1
    spawned: int = 0
    quota: int = 5
    spawn_timer: int = 0
    spawn_interval: int = 120
    boss_spawned: bool = False


@dataclass
class GameContext:
    paused: bool = False
    rng: random.Random = field(default_factory=lambda: random.Random(2025))
    width: int = 600
    height: int = 800
    frame_ms: int = 16
    strict: bool = False
    auto_fire: bool = True
    gameplay: GameplayConfig = field(default_factory=GameplayConfig)
    spawning: SpawnConfig = field(default_factory=SpawnConfig)
    difficulty: DifficultyPreset = field(default_factory=lambda: DifficultyPreset("normal", "Normal"))
    audio: AudioCues = field(default_factory=NullAudio)
    # banner/notification events for the presentation layer, drained by the host
    events: List[str] = field(default_factory=list)
    stats: RunStats = field(default_factory=RunStats)
    achievements: Achievements = field(default_factory=Achievements)
    effects: ActiveEffects = field(default_factory=ActiveEffects)
    skills: SkillBook = field(default_factory=SkillBook)
    wave: WaveState = field(default_factory=WaveState)
    input: InputState = field(default_factory=InputState)
    time_scale: float = 1.0
    powerup_timer: int = 0
    player: Optional[int] = None
    boss_warning_requested: bool = False
    game_over_reason: Optional[str] = None
    achievement_defs: dict = field(default_factory=dict)

    @property
    def spawn_x(self) -> float:
        return self.width / 2

    @property
    def spawn_y(self) -> float:
        return self.height - 100

    def cue(self, name: str) -> None:
        try:
            self.audio.play(name)
        except Exception:
            logger.warning("Audio cue %r failed", name, exc_info=True)

    def notify(self, message: str, *args: Any) -> None:
        self.events.append(message % args if args else message)

    def unlock(self, key: str) -> bool:
        if not self.achievements.unlock(key):
            return False
        label = self.achievement_defs.get(key, {}).get("name", key)
        logger.info("Achievement unlocked: %s", key)
        self.notify("Achievement: %s", label)
        self.cue("levelUp")
        return True
