from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional

from .content import BulletKind, EnemyKind
from .ecs_components import Enemy, Position, Stealth, Velocity
from .utils import rand_range

STEALTH_HIDDEN_TICKS = 180
STEALTH_VISIBLE_TICKS = 120
STEALTH_ALPHA = 0.3

BOSS_DEADBAND = 10.0
BOSS_Y_MIN = 100.0
BOSS_Y_MAX = 150.0
BOSS_ATTACK_EVERY = 300
BOSS_ATTACK_TICKS = 120
BOSS_ATTACK_INTERVAL = 20
BOSS_NORMAL_INTERVAL = 60


class BossState(str, Enum):
    NORMAL = "normal"
    ATTACK = "attack"


@dataclass
class BossBrain:
    state: BossState = BossState.NORMAL


class Shot(NamedTuple):
    x: float
    y: float
    vx: float
    vy: float
    kind: BulletKind


def aimed_velocity(x: float, y: float, tx: float, ty: float, speed: float) -> tuple[float, float]:
    angle = math.atan2(ty - y, tx - x)
    return math.cos(angle) * speed, math.sin(angle) * speed


# movement policies: (enemy, pos, vel, player_pos, rng, brain) -> None

def move_straight(enemy: Enemy, pos: Position, vel: Velocity, target: Optional[Position], rng: random.Random, brain: Optional[BossBrain]) -> None:
    vel.y = enemy.speed


def move_shooter(enemy: Enemy, pos: Position, vel: Velocity, target: Optional[Position], rng: random.Random, brain: Optional[BossBrain]) -> None:
    vel.y = enemy.speed
    if enemy.ai_timer % 60 == 0:
        vel.x = rand_range(rng, -1.0, 1.0)


def move_zigzag(enemy: Enemy, pos: Position, vel: Velocity, target: Optional[Position], rng: random.Random, brain: Optional[BossBrain]) -> None:
    vel.y = enemy.speed
    vel.x = math.sin(enemy.ai_timer * 0.1) * 2


def move_boss(enemy: Enemy, pos: Position, vel: Velocity, target: Optional[Position], rng: random.Random, brain: Optional[BossBrain]) -> None:
    if brain is None:
        return
    if brain.state is BossState.NORMAL:
        px = target.x if target is not None else pos.x
        if pos.x < px - BOSS_DEADBAND:
            vel.x = 1.0
        elif pos.x > px + BOSS_DEADBAND:
            vel.x = -1.0
        else:
            vel.x = 0.0
        if pos.y < BOSS_Y_MIN:
            vel.y = 0.5
        elif pos.y > BOSS_Y_MAX:
            vel.y = -0.5
        else:
            vel.y = 0.0
        if enemy.ai_timer % BOSS_ATTACK_EVERY == 0:
            brain.state = BossState.ATTACK
            enemy.ai_timer = 0
    else:
        enemy.shoot_interval = BOSS_ATTACK_INTERVAL
        if enemy.ai_timer > BOSS_ATTACK_TICKS:
            brain.state = BossState.NORMAL
            enemy.shoot_interval = BOSS_NORMAL_INTERVAL
            enemy.ai_timer = 0


# shoot policies: (enemy, pos, height, player_pos, brain) -> shots

def shoot_none(enemy: Enemy, pos: Position, height: float, target: Position, brain: Optional[BossBrain]) -> List[Shot]:
    return []


def shoot_aimed(enemy: Enemy, pos: Position, height: float, target: Position, brain: Optional[BossBrain]) -> List[Shot]:
    y = pos.y + height / 2
    vx, vy = aimed_velocity(pos.x, y, target.x, target.y, 3.0)
    return [Shot(pos.x, y, vx, vy, BulletKind.NORMAL)]


def shoot_boss(enemy: Enemy, pos: Position, height: float, target: Position, brain: Optional[BossBrain]) -> List[Shot]:
    y = pos.y + height / 2
    if brain is not None and brain.state is BossState.ATTACK:
        base = math.atan2(target.y - pos.y, target.x - pos.x)
        shots = []
        for i in range(-2, 3):
            angle = base + i * 0.3
            shots.append(Shot(pos.x, y, math.cos(angle) * 4.0, math.sin(angle) * 4.0, BulletKind.ENERGY))
        return shots
    vx, vy = aimed_velocity(pos.x, y, target.x, target.y, 3.0)
    return [Shot(pos.x, y, vx, vy, BulletKind.ENERGY)]


class Behavior(NamedTuple):
    move: Callable[..., None]
    shoot: Callable[..., List[Shot]]


BEHAVIORS: Dict[EnemyKind, Behavior] = {
    EnemyKind.BASIC: Behavior(move_straight, shoot_none),
    EnemyKind.FAST: Behavior(move_straight, shoot_none),
    EnemyKind.HEAVY: Behavior(move_straight, shoot_none),
    EnemyKind.SHOOTER: Behavior(move_shooter, shoot_aimed),
    EnemyKind.ZIGZAG: Behavior(move_zigzag, shoot_none),
    EnemyKind.STEALTH: Behavior(move_straight, shoot_none),
    EnemyKind.BOSS: Behavior(move_boss, shoot_boss),
}


def behavior_for(kind: EnemyKind) -> Behavior:
    return BEHAVIORS[kind]


def advance_stealth(stealth: Stealth) -> None:
    """Hidden for 180 ticks, then visible for 120, forever."""
    stealth.timer += 1
    if not stealth.visible:
        stealth.alpha = STEALTH_ALPHA
        if stealth.timer >= STEALTH_HIDDEN_TICKS:
            stealth.visible = True
            stealth.timer = 0
    else:
        stealth.alpha = 1.0
        if stealth.timer >= STEALTH_VISIBLE_TICKS:
            stealth.visible = False
            stealth.timer = 0
