from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class PlayerView:
    x: float
    y: float
    width: float
    height: float
    health: int
    max_health: int
    lives: int
    weapon_level: int
    shield: int
    energy_shield: int
    invulnerable: bool
    animation_frame: int
    trail: Tuple[Tuple[float, float], ...] = ()

    @property
    def health_fraction(self) -> float:
        return self.health / self.max_health if self.max_health else 0.0


@dataclass(frozen=True)
class EnemyView:
    x: float
    y: float
    width: float
    height: float
    kind: str
    health_fraction: float
    alpha: float = 1.0
    boss_state: Optional[str] = None
    trail: Tuple[Tuple[float, float], ...] = ()


@dataclass(frozen=True)
class BulletView:
    x: float
    y: float
    width: float
    height: float
    kind: str
    from_player: bool
    trail: Tuple[Tuple[float, float], ...] = ()


@dataclass(frozen=True)
class PowerUpView:
    x: float
    y: float
    width: float
    height: float
    kind: str
    bob: float = 0.0


@dataclass(frozen=True)
class ParticleView:
    x: float
    y: float
    size: float
    color: Tuple[int, int, int]
    alpha: float


@dataclass(frozen=True)
class HudView:
    state: str
    score: int
    high_score: int
    kills: int
    combo: int
    wave: int
    level: int
    lives: int
    health: int
    max_health: int
    accuracy: int
    elapsed_ms: float
    time_scale: float
    difficulty: str
    # name -> remaining ms
    effects: Dict[str, float]
    # name -> cooldown fraction, 0 when ready
    skills: Dict[str, float]
    boss_warning_ms: float = 0.0


@dataclass(frozen=True)
class WorldSnapshot:
    width: int
    height: int
    player: Optional[PlayerView]
    enemies: Tuple[EnemyView, ...]
    bullets: Tuple[BulletView, ...]
    powerups: Tuple[PowerUpView, ...]
    particles: Tuple[ParticleView, ...]
    hud: HudView
