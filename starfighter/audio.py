from __future__ import annotations

from array import array
from typing import Dict, List, Protocol, Tuple

import pygame

from .logger import get_logger

logger = get_logger(__name__)

# cue name -> (start Hz, end Hz, seconds)
TONES: Dict[str, Tuple[float, float, float]] = {
    "shoot": (800.0, 400.0, 0.1),
    "hit": (300.0, 150.0, 0.05),
    "explosion": (150.0, 50.0, 0.3),
    "powerup": (400.0, 1000.0, 0.3),
    "playerHit": (200.0, 100.0, 0.08),
    "bossAppear": (50.0, 80.0, 1.0),
    "levelUp": (523.0, 1047.0, 0.4),
}


class AudioCues(Protocol):
    def play(self, name: str) -> None: ...


class NullAudio:
    def play(self, name: str) -> None:
        pass


class RecordingAudio:
    def __init__(self) -> None:
        self.cues: List[str] = []

    def play(self, name: str) -> None:
        self.cues.append(name)

    def count(self, name: str) -> int:
        return self.cues.count(name)

    def clear(self) -> None:
        self.cues.clear()


def _sweep(start_hz: float, end_hz: float, seconds: float, rate: int, volume: float) -> array:
    n = max(1, int(rate * seconds))
    amp = int(32767 * volume)
    samples = array("h")
    phase = 0.0
    for i in range(n):
        t = i / n
        freq = start_hz + (end_hz - start_hz) * t
        phase += freq / rate
        value = amp if (phase % 1.0) < 0.5 else -amp
        # linear fade out to avoid clicks
        samples.append(int(value * (1.0 - t)))
    return samples


class ToneAudio:
    """Square-wave sweeps played through pygame.mixer, one Sound per cue."""

    def __init__(self, volume: float = 0.3, enabled: bool = True) -> None:
        self.volume = volume
        self.enabled = enabled
        self._sounds: Dict[str, "pygame.mixer.Sound"] = {}
        if not enabled:
            return
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=22050, size=-16, channels=1)
            rate, _fmt, channels = pygame.mixer.get_init()
            for name, (f0, f1, secs) in TONES.items():
                mono = _sweep(f0, f1, secs, rate, volume)
                if channels > 1:
                    mono = array("h", (s for s in mono for _ in range(channels)))
                self._sounds[name] = pygame.mixer.Sound(buffer=mono.tobytes())
        except pygame.error as exc:
            logger.warning("Audio disabled: %s", exc)
            self.enabled = False

    def play(self, name: str) -> None:
        if not self.enabled:
            return
        sound = self._sounds.get(name)
        if sound is None:
            logger.debug("No tone for cue %r", name)
            return
        sound.play()
