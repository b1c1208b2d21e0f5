from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional, Tuple

from .content import BulletKind, EnemyKind, PowerUpKind
from .utils import Circle, Rect, clamp


@dataclass
class Position:
    x: float
    y: float


@dataclass
class Velocity:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Hitbox:
    width: float
    height: float
    # circle radius = min(width, height) * radius_factor
    radius_factor: float = 0.5

    def rect(self, pos: Position) -> Rect:
        return Rect(pos.x - self.width / 2, pos.y - self.height / 2, self.width, self.height)

    @property
    def radius(self) -> float:
        return min(self.width, self.height) * self.radius_factor

    def circle(self, pos: Position) -> Circle:
        return Circle(pos.x, pos.y, self.radius)


@dataclass
class Trail:
    max_length: int = 5
    points: Deque[Tuple[float, float]] = field(default_factory=deque)

    def push(self, x: float, y: float) -> None:
        self.points.append((x, y))
        while len(self.points) > self.max_length:
            self.points.popleft()

    def clear(self) -> None:
        self.points.clear()


@dataclass
class PlayerShip:
    max_health: int = 3
    health: int = 3
    lives: int = 3
    base_speed: float = 5.0
    speed: float = 5.0
    base_shoot_interval: int = 15
    shoot_interval: int = 15
    shoot_timer: int = 0
    weapon_level: int = 1
    max_weapon_level: int = 5
    # extra pattern levels granted by multi_shot, reset every tick
    bonus_pattern: int = 0
    invulnerable_timer: int = 0
    invulnerable_duration: int = 120
    shield: int = 0
    max_shield: int = 3
    energy_shield: int = 0
    max_energy_shield: int = 5
    target_x: float = 0.0
    target_y: float = 0.0
    animation_frame: int = 0

    @property
    def invulnerable(self) -> bool:
        return self.invulnerable_timer > 0

    @property
    def has_shield(self) -> bool:
        return self.shield > 0

    @property
    def has_energy_shield(self) -> bool:
        return self.energy_shield > 0

    @property
    def pattern_level(self) -> int:
        return min(self.max_weapon_level, self.weapon_level + self.bonus_pattern)

    @property
    def weapon_kind(self) -> BulletKind:
        if self.weapon_level >= 4:
            return BulletKind.LASER
        if self.weapon_level >= 3:
            return BulletKind.PLASMA
        return BulletKind.NORMAL

    def start_invulnerability(self) -> None:
        self.invulnerable_timer = self.invulnerable_duration

    def take_damage(self, damage: int = 1) -> bool:
        """Apply one hit. Returns True only when health reaches zero.

        The first non-empty pool (energy shield, then shield, then health)
        takes the whole hit; overflow is not carried into the next pool.
        """
        if self.invulnerable:
            return False
        if self.energy_shield > 0:
            self.energy_shield = max(0, self.energy_shield - damage)
            self.start_invulnerability()
            return False
        if self.shield > 0:
            self.shield = max(0, self.shield - damage)
            self.start_invulnerability()
            return False
        self.health = int(clamp(self.health - damage, 0, self.max_health))
        self.start_invulnerability()
        return self.health == 0

    def heal(self, amount: int = 1) -> None:
        self.health = int(clamp(self.health + amount, 0, self.max_health))

    def grant_shield(self, amount: Optional[int] = None) -> None:
        self.shield = max(0, self.max_shield if amount is None else amount)

    def activate_energy_shield(self) -> None:
        self.energy_shield = self.max_energy_shield

    def upgrade_weapon(self) -> None:
        self.weapon_level = min(self.max_weapon_level, self.weapon_level + 1)

    def add_life(self) -> None:
        self.lives += 1

    def respawn(self, pos: Position, x: float, y: float) -> bool:
        if self.lives <= 0:
            return False
        self.lives -= 1
        self.health = self.max_health
        self.weapon_level = 1
        self.shield = 0
        self.energy_shield = 0
        pos.x, pos.y = x, y
        self.target_x, self.target_y = x, y
        self.start_invulnerability()
        return True


@dataclass
class Enemy:
    kind: EnemyKind
    health: int
    max_health: int
    speed: float
    score: int
    can_shoot: bool = False
    shoot_interval: int = 120
    shoot_timer: int = 0
    ai_timer: int = 0
    dead: bool = False

    @property
    def health_fraction(self) -> float:
        return clamp(self.health / max(1, self.max_health), 0.0, 1.0)

    def take_damage(self, damage: int = 1) -> bool:
        """True exactly once: on the call that drops health to zero or below."""
        if self.dead:
            return False
        self.health -= damage
        if self.health <= 0:
            self.health = 0
            self.dead = True
            return True
        return False


@dataclass
class Stealth:
    timer: int = 0
    visible: bool = True
    alpha: float = 1.0


@dataclass
class Bullet:
    damage: int
    owner: str  # 'player' or 'enemy'
    kind: BulletKind = BulletKind.NORMAL

    @property
    def from_player(self) -> bool:
        return self.owner == "player"


@dataclass
class PowerUp:
    kind: PowerUpKind
    duration_ms: int
    bob: float = 0.0


@dataclass
class Particle:
    life: float
    max_life: float
    size: float
    color: tuple[int, int, int]
    gravity: float = 0.0
    friction: float = 0.98

    @property
    def alpha(self) -> float:
        return clamp(self.life / self.max_life, 0.0, 1.0) if self.max_life > 0 else 0.0
