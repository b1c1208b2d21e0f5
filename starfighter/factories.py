from __future__ import annotations

import math
import random
from typing import Optional

import esper

from .ai import BossBrain, aimed_velocity
from .config import GameplayConfig
from .content import (
    ENEMY_VARIANTS,
    POWERUP_VARIANTS,
    BulletKind,
    DifficultyPreset,
    EnemyKind,
    PowerUpKind,
)
from .ecs_components import (
    Bullet,
    Enemy,
    Hitbox,
    Particle,
    PlayerShip,
    Position,
    PowerUp,
    Stealth,
    Trail,
    Velocity,
)
from .utils import rand_range

PLAYER_BULLET_SPEED = 8.0
ENEMY_BULLET_SPEED = 4.0


def create_player(gameplay: GameplayConfig, difficulty: DifficultyPreset, pos: tuple[float, float]) -> int:
    x, y = float(pos[0]), float(pos[1])
    ship = PlayerShip(
        max_health=gameplay.player_max_health,
        health=gameplay.player_max_health,
        lives=difficulty.starting_lives,
        base_speed=gameplay.player_speed,
        speed=gameplay.player_speed,
        base_shoot_interval=gameplay.player_shoot_interval,
        shoot_interval=gameplay.player_shoot_interval,
        invulnerable_duration=gameplay.player_invulnerable_frames,
        max_shield=gameplay.player_max_shield,
        max_energy_shield=gameplay.player_max_energy_shield,
        target_x=x,
        target_y=y,
    )
    return esper.create_entity(
        Position(x, y),
        Velocity(0.0, 0.0),
        Hitbox(40, 50, radius_factor=1 / 3),
        ship,
        Trail(max_length=10),
    )


def create_enemy(kind: EnemyKind, x: float, y: float, difficulty: Optional[DifficultyPreset] = None) -> int:
    v = ENEMY_VARIANTS[kind]
    speed = v.speed
    health = v.health
    # bosses keep their base stats on every difficulty
    if difficulty is not None and kind is not EnemyKind.BOSS:
        speed *= difficulty.enemy_speed_multiplier
        health = math.ceil(health * difficulty.enemy_health_multiplier)
    enemy = Enemy(
        kind=kind,
        health=health,
        max_health=health,
        speed=speed,
        score=v.score,
        can_shoot=v.can_shoot,
        shoot_interval=v.shoot_interval,
    )
    e = esper.create_entity(
        Position(float(x), float(y)),
        Velocity(0.0, speed),
        Hitbox(v.width, v.height),
        enemy,
        Trail(max_length=5),
    )
    if kind is EnemyKind.STEALTH:
        esper.add_component(e, Stealth(visible=False, alpha=0.3))
    if kind is EnemyKind.BOSS:
        esper.add_component(e, BossBrain())
    return e


def create_player_bullet(
    x: float,
    y: float,
    vx: float = 0.0,
    vy: float = -PLAYER_BULLET_SPEED,
    damage: int = 1,
    kind: BulletKind = BulletKind.NORMAL,
    width: float = 4,
    height: float = 12,
) -> int:
    return esper.create_entity(
        Position(x, y),
        Velocity(vx, vy),
        Hitbox(width, height),
        Bullet(damage=damage, owner="player", kind=kind),
        Trail(max_length=8),
    )


def create_enemy_bullet(
    x: float,
    y: float,
    vx: float,
    vy: float,
    kind: BulletKind = BulletKind.NORMAL,
    damage: int = 1,
) -> int:
    return esper.create_entity(
        Position(x, y),
        Velocity(vx, vy),
        Hitbox(6, 6),
        Bullet(damage=damage, owner="enemy", kind=kind),
        Trail(max_length=6),
    )


def create_aimed_bullet(x: float, y: float, target_x: float, target_y: float, speed: float = ENEMY_BULLET_SPEED, kind: BulletKind = BulletKind.NORMAL) -> int:
    vx, vy = aimed_velocity(x, y, target_x, target_y, speed)
    return create_enemy_bullet(x, y, vx, vy, kind)


def create_powerup(kind: PowerUpKind, x: float, y: float) -> int:
    v = POWERUP_VARIANTS[kind]
    return esper.create_entity(
        Position(float(x), float(y)),
        Velocity(0.0, 2.0),
        Hitbox(30, 30),
        PowerUp(kind=kind, duration_ms=v.duration_ms),
    )


def _particle(x: float, y: float, vx: float, vy: float, life: float, size: float, color: tuple[int, int, int], gravity: float = 0.0, friction: float = 0.98) -> int:
    return esper.create_entity(
        Position(x, y),
        Velocity(vx, vy),
        Particle(life=life, max_life=life, size=size, color=color, gravity=gravity, friction=friction),
    )


def spawn_explosion(rng: random.Random, x: float, y: float, count: int = 15, color: Optional[tuple[int, int, int]] = None) -> None:
    for i in range(count):
        angle = math.tau * i / count
        speed = rand_range(rng, 2, 8)
        c = color or ((255, 107, 107) if rng.random() > 0.5 else (255, 165, 0))
        _particle(x, y, math.cos(angle) * speed, math.sin(angle) * speed, rand_range(rng, 0.5, 1.5), rand_range(rng, 3, 8), c, friction=0.95)


def spawn_sparks(rng: random.Random, x: float, y: float, count: int = 8, color: tuple[int, int, int] = (255, 255, 0)) -> None:
    for _ in range(count):
        _particle(x, y, rand_range(rng, -4, 4), rand_range(rng, -4, 4), rand_range(rng, 0.3, 0.8), rand_range(rng, 1, 3), color, gravity=0.1, friction=0.99)


def spawn_smoke(rng: random.Random, x: float, y: float, count: int = 5, color: tuple[int, int, int] = (102, 102, 102)) -> None:
    for _ in range(count):
        _particle(x, y, rand_range(rng, -1, 1), rand_range(rng, -3, -1), rand_range(rng, 1.0, 2.0), rand_range(rng, 5, 12), color)


def spawn_stars(rng: random.Random, x: float, y: float, count: int = 10, color: tuple[int, int, int] = (78, 205, 196)) -> None:
    for _ in range(count):
        angle = rand_range(rng, 0, math.tau)
        speed = rand_range(rng, 1, 4)
        _particle(x, y, math.cos(angle) * speed, math.sin(angle) * speed, rand_range(rng, 0.8, 1.5), rand_range(rng, 2, 5), color, friction=0.97)


def spawn_trail(rng: random.Random, x: float, y: float, color: tuple[int, int, int] = (255, 255, 255)) -> None:
    _particle(x, y, rand_range(rng, -0.5, 0.5), rand_range(rng, 0.5, 2), rand_range(rng, 0.2, 0.5), rand_range(rng, 2, 4), color, friction=0.95)
