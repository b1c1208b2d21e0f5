from __future__ import annotations

from typing import Dict, Iterator, List, Set, Tuple


class ActiveEffects:
    """Timed power-up effects keyed by name, counted down in milliseconds.

    Setting an effect that is already active replaces its remaining time
    instead of stacking it.
    """

    def __init__(self) -> None:
        self._remaining: Dict[str, float] = {}
        self._fresh: Set[str] = set()

    def set(self, name: str, duration_ms: float) -> None:
        if duration_ms <= 0:
            return
        self._remaining[name] = float(duration_ms)
        self._fresh.add(name)

    def has(self, name: str) -> bool:
        return self._remaining.get(name, 0.0) > 0

    def remaining(self, name: str) -> float:
        return max(0.0, self._remaining.get(name, 0.0))

    def consume_pickup(self, name: str) -> bool:
        # True once after each set(); drives one-shot grants
        if name in self._fresh and self.has(name):
            self._fresh.discard(name)
            return True
        return False

    def tick(self, ms: float) -> List[str]:
        expired: List[str] = []
        for name in list(self._remaining):
            left = self._remaining[name] - ms
            if left <= 0:
                del self._remaining[name]
                self._fresh.discard(name)
                expired.append(name)
            else:
                self._remaining[name] = left
        return expired

    def clear(self) -> None:
        self._remaining.clear()
        self._fresh.clear()

    def items(self) -> List[Tuple[str, float]]:
        return sorted(self._remaining.items())

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._remaining))

    def __len__(self) -> int:
        return len(self._remaining)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)
