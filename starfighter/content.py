from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Type, TypeVar

import yaml

from .logger import get_logger

logger = get_logger(__name__)


class UnknownVariantError(ValueError):
    pass


class EnemyKind(str, Enum):
    BASIC = "basic"
    FAST = "fast"
    HEAVY = "heavy"
    SHOOTER = "shooter"
    ZIGZAG = "zigzag"
    STEALTH = "stealth"
    BOSS = "boss"


class BulletKind(str, Enum):
    NORMAL = "normal"
    LASER = "laser"
    PLASMA = "plasma"
    MISSILE = "missile"
    ENERGY = "energy"
    HOMING = "homing"


class PowerUpKind(str, Enum):
    HEALTH = "health"
    WEAPON_UPGRADE = "weapon_upgrade"
    SHIELD = "shield"
    SPEED = "speed"
    MULTI_SHOT = "multi_shot"
    SCORE_BONUS = "score_bonus"
    RAPID_FIRE = "rapid_fire"
    ENERGY_SHIELD = "energy_shield"
    TIME_SLOW = "time_slow"


class SkillKind(str, Enum):
    SUPER_SHOT = "super_shot"
    TIME_WARP = "time_warp"
    ENERGY_SHIELD = "energy_shield"
    CLEAR_BOMB = "clear_bomb"


@dataclass(frozen=True)
class EnemyVariant:
    kind: EnemyKind
    health: int
    speed: float
    score: int
    color: tuple[int, int, int]
    width: int = 30
    height: int = 30
    can_shoot: bool = False
    shoot_interval: int = 120


ENEMY_VARIANTS: Dict[EnemyKind, EnemyVariant] = {
    EnemyKind.BASIC: EnemyVariant(EnemyKind.BASIC, 1, 2.0, 100, (255, 107, 107)),
    EnemyKind.FAST: EnemyVariant(EnemyKind.FAST, 1, 4.0, 150, (78, 205, 196)),
    EnemyKind.HEAVY: EnemyVariant(EnemyKind.HEAVY, 3, 1.0, 300, (155, 89, 182), width=40, height=40),
    EnemyKind.SHOOTER: EnemyVariant(EnemyKind.SHOOTER, 2, 1.5, 200, (243, 156, 18), can_shoot=True, shoot_interval=90),
    EnemyKind.ZIGZAG: EnemyVariant(EnemyKind.ZIGZAG, 2, 2.0, 250, (231, 76, 60)),
    EnemyKind.STEALTH: EnemyVariant(EnemyKind.STEALTH, 2, 3.0, 400, (52, 73, 94), can_shoot=True, shoot_interval=120),
    EnemyKind.BOSS: EnemyVariant(EnemyKind.BOSS, 20, 1.0, 2000, (44, 62, 80), width=80, height=80, can_shoot=True, shoot_interval=60),
}


@dataclass(frozen=True)
class PowerUpVariant:
    kind: PowerUpKind
    duration_ms: int
    color: tuple[int, int, int]

    @property
    def instant(self) -> bool:
        return self.duration_ms == 0


POWERUP_VARIANTS: Dict[PowerUpKind, PowerUpVariant] = {
    PowerUpKind.HEALTH: PowerUpVariant(PowerUpKind.HEALTH, 0, (255, 68, 68)),
    PowerUpKind.WEAPON_UPGRADE: PowerUpVariant(PowerUpKind.WEAPON_UPGRADE, 10000, (0, 255, 0)),
    PowerUpKind.SHIELD: PowerUpVariant(PowerUpKind.SHIELD, 8000, (68, 68, 255)),
    PowerUpKind.SPEED: PowerUpVariant(PowerUpKind.SPEED, 6000, (255, 255, 0)),
    PowerUpKind.MULTI_SHOT: PowerUpVariant(PowerUpKind.MULTI_SHOT, 12000, (255, 0, 255)),
    PowerUpKind.SCORE_BONUS: PowerUpVariant(PowerUpKind.SCORE_BONUS, 0, (0, 255, 255)),
    PowerUpKind.RAPID_FIRE: PowerUpVariant(PowerUpKind.RAPID_FIRE, 8000, (255, 165, 0)),
    PowerUpKind.ENERGY_SHIELD: PowerUpVariant(PowerUpKind.ENERGY_SHIELD, 15000, (155, 89, 182)),
    PowerUpKind.TIME_SLOW: PowerUpVariant(PowerUpKind.TIME_SLOW, 5000, (52, 152, 219)),
}

SCORE_BONUS_VALUE = 1000
HEAL_VALUE = 1


@dataclass(frozen=True)
class DifficultyPreset:
    key: str
    name: str
    enemy_speed_multiplier: float = 1.0
    enemy_health_multiplier: float = 1.0
    starting_lives: int = 3


DEFAULT_DIFFICULTIES: Dict[str, Dict[str, Any]] = {
    "easy": {"name": "Easy", "enemy_speed_multiplier": 0.7, "enemy_health_multiplier": 0.8, "starting_lives": 5},
    "normal": {"name": "Normal", "enemy_speed_multiplier": 1.0, "enemy_health_multiplier": 1.0, "starting_lives": 3},
    "hard": {"name": "Hard", "enemy_speed_multiplier": 1.3, "enemy_health_multiplier": 1.2, "starting_lives": 2},
    "nightmare": {"name": "Nightmare", "enemy_speed_multiplier": 1.6, "enemy_health_multiplier": 1.5, "starting_lives": 1},
}

DEFAULT_ACHIEVEMENTS: Dict[str, Dict[str, Any]] = {
    "first_kill": {"name": "First Blood", "description": "Destroy your first enemy"},
    "combo10": {"name": "Combo Ace", "description": "Reach a 10 kill combo"},
    "combo50": {"name": "Combo Master", "description": "Reach a 50 kill combo"},
    "survivor": {"name": "Survivor", "description": "Stay alive for 5 minutes"},
    "boss_killer": {"name": "Boss Slayer", "description": "Destroy your first boss"},
    "collector": {"name": "Collector", "description": "Collect 50 power-ups in one run"},
    "marksman": {"name": "Marksman", "description": "Finish a run with at least 90% accuracy"},
}

E = TypeVar("E", bound=Enum)


def _resolve(enum_type: Type[E], key: Any, default: E, strict: bool) -> E:
    if isinstance(key, enum_type):
        return key
    try:
        return enum_type(key)
    except ValueError:
        if strict:
            raise UnknownVariantError(f"unknown {enum_type.__name__}: {key!r}") from None
        logger.warning("Unknown %s %r, falling back to %s", enum_type.__name__, key, default.value)
        return default


def resolve_enemy_kind(key: Any, strict: bool = False) -> EnemyKind:
    return _resolve(EnemyKind, key, EnemyKind.BASIC, strict)


def resolve_powerup_kind(key: Any, strict: bool = False) -> PowerUpKind:
    return _resolve(PowerUpKind, key, PowerUpKind.HEALTH, strict)


def resolve_skill(key: Any, strict: bool = False) -> SkillKind | None:
    if isinstance(key, SkillKind):
        return key
    try:
        return SkillKind(key)
    except ValueError:
        if strict:
            raise UnknownVariantError(f"unknown SkillKind: {key!r}") from None
        logger.warning("Ignoring unknown skill %r", key)
        return None


def _load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}


class Content:
    def __init__(self, base_dir: str | Path = ".", strict: bool = False) -> None:
        self.base = Path(base_dir)
        self.strict = strict
        self.difficulties = _load_yaml(self.base / "data/difficulties.yaml") or dict(DEFAULT_DIFFICULTIES)
        self.achievements = _load_yaml(self.base / "data/achievements.yaml") or dict(DEFAULT_ACHIEVEMENTS)

    def difficulty(self, key: str) -> DifficultyPreset:
        raw = self.difficulties.get(key)
        if raw is None:
            if self.strict:
                raise UnknownVariantError(f"unknown difficulty: {key!r}")
            logger.warning("Unknown difficulty %r, falling back to normal", key)
            key = "normal"
            raw = self.difficulties.get(key) or DEFAULT_DIFFICULTIES[key]
        return DifficultyPreset(
            key=key,
            name=str(raw.get("name", key.title())),
            enemy_speed_multiplier=float(raw.get("enemy_speed_multiplier", 1.0)),
            enemy_health_multiplier=float(raw.get("enemy_health_multiplier", 1.0)),
            starting_lives=int(raw.get("starting_lives", 3)),
        )

    def achievement(self, key: str) -> Dict[str, Any]:
        return dict(self.achievements.get(key, {}))

    def enemy_table(self) -> Dict[str, Dict[str, Any]]:
        out = {}
        for kind, v in ENEMY_VARIANTS.items():
            out[kind.value] = {
                "health": v.health,
                "speed": v.speed,
                "score": v.score,
                "width": v.width,
                "height": v.height,
                "can_shoot": v.can_shoot,
                "shoot_interval": v.shoot_interval,
            }
        return out

    def powerup_table(self) -> Dict[str, Dict[str, Any]]:
        return {kind.value: {"duration_ms": v.duration_ms} for kind, v in POWERUP_VARIANTS.items()}
