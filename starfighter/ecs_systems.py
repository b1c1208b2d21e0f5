from __future__ import annotations

import math
from typing import List, Optional, Tuple

import esper

from .ai import BossBrain, Shot, advance_stealth, behavior_for
from .content import (
    HEAL_VALUE,
    SCORE_BONUS_VALUE,
    BulletKind,
    EnemyKind,
    PowerUpKind,
    SkillKind,
)
from .context import GameContext
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
from .factories import (
    create_enemy,
    create_enemy_bullet,
    create_player_bullet,
    create_powerup,
    spawn_explosion,
    spawn_smoke,
    spawn_sparks,
    spawn_stars,
)
from .logger import get_logger
from .scoring import progress_achievements
from .utils import circle_collision, clamp, rand_int, rand_range, rect_collision

logger = get_logger(__name__)

OFFSCREEN_MARGIN = 50
TIME_WARP_SCALE = 0.3
TIME_SLOW_SCALE = 0.5
CLEAR_BOMB_BLAST = 10

# (threshold, kind) pairs walked in order; anything past the last is basic
WAVE_WEIGHTS: List[Tuple[int, List[Tuple[float, EnemyKind]]]] = [
    (5, [(0.05, EnemyKind.STEALTH), (0.15, EnemyKind.HEAVY), (0.35, EnemyKind.SHOOTER), (0.55, EnemyKind.ZIGZAG), (0.75, EnemyKind.FAST)]),
    (3, [(0.1, EnemyKind.HEAVY), (0.3, EnemyKind.SHOOTER), (0.5, EnemyKind.ZIGZAG), (0.7, EnemyKind.FAST)]),
    (2, [(0.2, EnemyKind.SHOOTER), (0.4, EnemyKind.FAST)]),
]


def pick_enemy_kind(wave: int, roll: float) -> EnemyKind:
    for min_wave, table in WAVE_WEIGHTS:
        if wave >= min_wave:
            for threshold, kind in table:
                if roll < threshold:
                    return kind
            break
    return EnemyKind.BASIC


def weapon_volley(ship: PlayerShip, x: float, y: float) -> List[Shot]:
    """Bullets for one trigger pull, keyed by the ship's pattern level."""
    kind = ship.weapon_kind
    level = ship.pattern_level
    vy = -8.0
    if level <= 1:
        return [Shot(x, y, 0.0, vy, kind)]
    if level == 2:
        return [Shot(x - 8, y, 0.0, vy, kind), Shot(x + 8, y, 0.0, vy, kind)]
    if level == 3:
        return [Shot(x, y, 0.0, vy, kind), Shot(x - 12, y, 0.0, vy, kind), Shot(x + 12, y, 0.0, vy, kind)]
    if level == 4:
        shots = []
        for i in range(4):
            angle = (i - 1.5) * 0.2
            shots.append(Shot(x, y, math.sin(angle) * 2, vy + math.cos(angle) * 2, kind))
        return shots
    shots = []
    for i in range(5):
        angle = (i - 2) * 0.3
        shots.append(Shot(x, y, math.sin(angle) * 3, vy + math.cos(angle) * 2, BulletKind.LASER))
    return shots


def super_shot_volley(x: float, y: float) -> List[Shot]:
    shots = []
    for i in range(-4, 5):
        angle = i * 0.2
        shots.append(Shot(x, y, math.sin(angle) * 3, -10 + math.cos(angle) * 2, BulletKind.LASER))
    return shots


def offscreen(pos: Position, width: int, height: int, margin: float = OFFSCREEN_MARGIN) -> bool:
    return pos.y < -margin or pos.y > height + margin or pos.x < -margin or pos.x > width + margin


def alive_enemies() -> List[Tuple[int, Tuple[Position, Hitbox, Enemy]]]:
    return [
        (e, comps)
        for e, comps in esper.get_components(Position, Hitbox, Enemy)
        if esper.entity_exists(e) and not comps[2].dead
    ]


def player_components(ctx: GameContext) -> Optional[Tuple[Position, Hitbox, PlayerShip]]:
    if ctx.player is None or not esper.entity_exists(ctx.player):
        return None
    return (
        esper.component_for_entity(ctx.player, Position),
        esper.component_for_entity(ctx.player, Hitbox),
        esper.component_for_entity(ctx.player, PlayerShip),
    )


def apply_powerup(ctx: GameContext, ship: PlayerShip, kind: PowerUpKind, duration_ms: int) -> None:
    if kind is PowerUpKind.HEALTH:
        ship.heal(HEAL_VALUE)
    elif kind is PowerUpKind.SCORE_BONUS:
        ctx.stats.score += SCORE_BONUS_VALUE
    else:
        ctx.effects.set(kind.value, duration_ms)
        if kind is PowerUpKind.ENERGY_SHIELD:
            ship.activate_energy_shield()
        elif kind is PowerUpKind.WEAPON_UPGRADE:
            ctx.cue("levelUp")
    logger.debug("Collected power-up %s", kind.value)


def kill_enemy(ctx: GameContext, e: int, pos: Position, enemy: Enemy, combo: bool = True, drop: bool = True, blast: int = 15) -> None:
    """Score, effects and removal for an enemy that just died."""
    if combo:
        ctx.stats.register_kill(enemy.score)
    else:
        ctx.stats.credit_kill(enemy.score)
    ctx.cue("hit")
    spawn_explosion(ctx.rng, pos.x, pos.y, blast)
    for key in progress_achievements(ctx.stats):
        ctx.unlock(key)
    if drop and ctx.rng.random() < ctx.spawning.drop_chance:
        kinds = list(PowerUpKind)
        create_powerup(kinds[rand_int(ctx.rng, 0, len(kinds) - 1)], pos.x, pos.y)
    if enemy.kind is EnemyKind.BOSS:
        spawn_explosion(ctx.rng, pos.x, pos.y, 30)
        ctx.cue("explosion")
        ctx.unlock("boss_killer")
        logger.info("Boss destroyed on wave %d", ctx.wave.wave)
    esper.delete_entity(e)


def fire_super_shot(ctx: GameContext) -> int:
    comps = player_components(ctx)
    if comps is None:
        return 0
    pos, hb, _ship = comps
    shots = super_shot_volley(pos.x, pos.y - hb.height / 2)
    for s in shots:
        create_player_bullet(s.x, s.y, s.vx, s.vy, damage=3, kind=s.kind, width=6, height=15)
    ctx.stats.shots += len(shots)
    return len(shots)


def clear_bomb(ctx: GameContext) -> int:
    """Destroy every live enemy and enemy bullet. Returns enemies destroyed."""
    count = 0
    for e, (pos, _hb, enemy) in alive_enemies():
        enemy.take_damage(enemy.health)
        kill_enemy(ctx, e, pos, enemy, combo=False, drop=False, blast=CLEAR_BOMB_BLAST)
        count += 1
    for b, (pos, bullet) in esper.get_components(Position, Bullet):
        if bullet.from_player or not esper.entity_exists(b):
            continue
        spawn_stars(ctx.rng, pos.x, pos.y, 3)
        esper.delete_entity(b)
    ctx.cue("explosion")
    return count


class TimerSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.paused:
            return
        ms = self.ctx.frame_ms
        self.ctx.stats.frames += 1
        self.ctx.stats.elapsed_ms += ms
        for kind in self.ctx.skills.tick(ms):
            logger.debug("Skill %s ended", kind.value)
        self.ctx.stats.tick_combo()
        if self.ctx.skills.active(SkillKind.TIME_WARP):
            self.ctx.time_scale = TIME_WARP_SCALE
        elif self.ctx.effects.has(PowerUpKind.TIME_SLOW.value):
            self.ctx.time_scale = TIME_SLOW_SCALE
        else:
            self.ctx.time_scale = 1.0


class PlayerControlSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.paused:
            return
        comps = player_components(self.ctx)
        if comps is None:
            return
        pos, hb, ship = comps
        trail = esper.try_component(self.ctx.player, Trail)
        inp = self.ctx.input

        if inp.target is not None:
            ship.target_x, ship.target_y = inp.target
        if inp.directional:
            pos.x += (int(inp.right) - int(inp.left)) * ship.speed
            pos.y += (int(inp.down) - int(inp.up)) * ship.speed
            ship.target_x, ship.target_y = pos.x, pos.y
        else:
            dx, dy = ship.target_x - pos.x, ship.target_y - pos.y
            dist = math.hypot(dx, dy)
            if dist > 2:
                pos.x += dx / dist * ship.speed
                pos.y += dy / dist * ship.speed
            else:
                pos.x, pos.y = ship.target_x, ship.target_y

        ship.shoot_timer += 1
        if ship.invulnerable_timer > 0:
            ship.invulnerable_timer -= 1
        ship.animation_frame += 1
        if trail is not None:
            trail.push(pos.x, pos.y + hb.height / 2)

        self._apply_effects(ship)

        pos.x = clamp(pos.x, hb.width / 2, self.ctx.width - hb.width / 2)
        pos.y = clamp(pos.y, hb.height / 2, self.ctx.height - hb.height / 2)

        if (self.ctx.auto_fire or inp.shoot) and ship.shoot_timer >= ship.shoot_interval:
            shots = weapon_volley(ship, pos.x, pos.y - hb.height / 2)
            for s in shots:
                create_player_bullet(s.x, s.y, s.vx, s.vy, damage=ship.weapon_level, kind=s.kind)
            self.ctx.stats.shots += len(shots)
            ship.shoot_timer = 0
            self.ctx.cue("shoot")

    def _apply_effects(self, ship: PlayerShip) -> None:
        fx = self.ctx.effects
        ship.speed = ship.base_speed
        ship.shoot_interval = ship.base_shoot_interval
        ship.bonus_pattern = 0
        if fx.has(PowerUpKind.SPEED.value):
            ship.speed = ship.base_speed * 1.5
        if fx.has(PowerUpKind.RAPID_FIRE.value):
            ship.shoot_interval = math.floor(ship.base_shoot_interval * 0.5)
        if fx.has(PowerUpKind.MULTI_SHOT.value):
            ship.bonus_pattern = 1
        if fx.consume_pickup(PowerUpKind.SHIELD.value):
            ship.grant_shield()
        if fx.consume_pickup(PowerUpKind.WEAPON_UPGRADE.value):
            ship.upgrade_weapon()


class BulletSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.paused:
            return
        for e, (pos, vel, bullet, trail) in esper.get_components(Position, Velocity, Bullet, Trail):
            scale = 1.0 if bullet.from_player else self.ctx.time_scale
            pos.x += vel.x * scale
            pos.y += vel.y * scale
            trail.push(pos.x, pos.y)
            if offscreen(pos, self.ctx.width, self.ctx.height):
                esper.delete_entity(e)


class EnemyAISystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.paused:
            return
        comps = player_components(self.ctx)
        target = comps[0] if comps is not None else None
        scale = self.ctx.time_scale
        for e, (pos, vel, hb, enemy, trail) in esper.get_components(Position, Velocity, Hitbox, Enemy, Trail):
            if enemy.dead:
                continue
            brain = esper.try_component(e, BossBrain)
            behavior = behavior_for(enemy.kind)
            enemy.ai_timer += 1
            behavior.move(enemy, pos, vel, target, self.ctx.rng, brain)

            pos.x += vel.x * scale
            pos.y += vel.y * scale
            pos.x = clamp(pos.x, hb.width / 2, self.ctx.width - hb.width / 2)

            if enemy.can_shoot and target is not None:
                enemy.shoot_timer += 1
                if enemy.shoot_timer >= enemy.shoot_interval:
                    for s in behavior.shoot(enemy, pos, hb.height, target, brain):
                        create_enemy_bullet(s.x, s.y, s.vx, s.vy, kind=s.kind)
                    enemy.shoot_timer = 0

            stealth = esper.try_component(e, Stealth)
            if stealth is not None:
                advance_stealth(stealth)
            trail.push(pos.x, pos.y)

            # above the screen is where enemies enter, so only the other edges count
            if pos.y > self.ctx.height + OFFSCREEN_MARGIN or pos.x < -OFFSCREEN_MARGIN or pos.x > self.ctx.width + OFFSCREEN_MARGIN:
                esper.delete_entity(e)


class EnemySpawnSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.paused:
            return
        cfg = self.ctx.spawning
        wave = self.ctx.wave
        alive = len(alive_enemies())

        wave.spawn_timer += 1
        if wave.spawn_timer >= wave.spawn_interval and alive < cfg.max_alive and wave.spawned < wave.quota:
            self.spawn_regular()
            wave.spawn_timer = 0
            return

        if wave.spawned < wave.quota or alive > 0:
            return
        if wave.wave % cfg.boss_every == 0 and not wave.boss_spawned:
            self.spawn_boss()
            return
        self.next_wave()

    def spawn_regular(self) -> int:
        cfg = self.ctx.spawning
        wave = self.ctx.wave
        kind = pick_enemy_kind(wave.wave, self.ctx.rng.random())
        x = rand_range(self.ctx.rng, 50, self.ctx.width - 50)
        e = create_enemy(kind, x, -30, self.ctx.difficulty)
        wave.spawned += 1
        wave.spawn_interval = max(cfg.min_interval, cfg.base_interval - wave.wave * cfg.interval_step)
        return e

    def spawn_boss(self) -> int:
        e = create_enemy(EnemyKind.BOSS, self.ctx.width / 2, -50)
        self.ctx.wave.boss_spawned = True
        self.ctx.cue("bossAppear")
        self.ctx.notify("Boss incoming")
        logger.info("Boss spawned on wave %d", self.ctx.wave.wave)
        return e

    def next_wave(self) -> None:
        cfg = self.ctx.spawning
        wave = self.ctx.wave
        wave.wave += 1
        wave.spawned = 0
        wave.quota = min(cfg.wave_quota_cap, cfg.wave_quota_base + wave.wave // 2)
        wave.boss_spawned = False
        self.ctx.notify("Wave %d", wave.wave)
        logger.info("Wave %d begins (quota %d)", wave.wave, wave.quota)


class PowerUpSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.paused:
            return
        for e, (pos, vel, pu) in esper.get_components(Position, Velocity, PowerUp):
            pos.x += vel.x
            pos.y += vel.y
            pu.bob += 0.1
            if pos.y > self.ctx.height + OFFSCREEN_MARGIN:
                esper.delete_entity(e)

        for name in self.ctx.effects.tick(self.ctx.frame_ms):
            logger.debug("Effect %s expired", name)

        self.ctx.powerup_timer += 1
        if self.ctx.powerup_timer >= self.ctx.spawning.powerup_interval:
            kinds = list(PowerUpKind)
            kind = kinds[rand_int(self.ctx.rng, 0, len(kinds) - 1)]
            create_powerup(kind, rand_range(self.ctx.rng, 50, self.ctx.width - 50), -30)
            self.ctx.powerup_timer = 0


class ParticleSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.paused:
            return
        for e, (pos, vel, p) in esper.get_components(Position, Velocity, Particle):
            pos.x += vel.x
            pos.y += vel.y
            vel.y += p.gravity
            vel.x *= p.friction
            vel.y *= p.friction
            p.life -= 0.02
            if p.life <= 0:
                esper.delete_entity(e)


class CollisionSystem(esper.Processor):
    """Fixed order: player bullets, enemy bullets, rams, pickups."""

    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.paused:
            return
        self._player_bullets_vs_enemies()
        comps = player_components(self.ctx)
        if comps is None:
            return
        pos, hb, ship = comps
        if self._enemy_bullets_vs_player(pos, hb, ship):
            return
        if self._enemies_vs_player(pos, hb, ship):
            return
        self._powerups_vs_player(pos, hb, ship)

    def _player_bullets_vs_enemies(self) -> None:
        enemies = alive_enemies()
        for b, (bpos, bhb, bullet) in esper.get_components(Position, Hitbox, Bullet):
            if not bullet.from_player or not esper.entity_exists(b):
                continue
            brect = bhb.rect(bpos)
            struck = [
                (e, epos, enemy) for e, (epos, ehb, enemy) in enemies
                if not enemy.dead and rect_collision(brect, ehb.rect(epos))
            ]
            if not struck:
                continue
            for e, epos, enemy in struck:
                if enemy.take_damage(bullet.damage):
                    # only lethal hits count toward accuracy
                    self.ctx.stats.hits += 1
                    kill_enemy(self.ctx, e, epos, enemy)
                else:
                    spawn_sparks(self.ctx.rng, bpos.x, bpos.y, 4)
            esper.delete_entity(b)

    def _enemy_bullets_vs_player(self, pos: Position, hb: Hitbox, ship: PlayerShip) -> bool:
        prect = hb.rect(pos)
        for b, (bpos, bhb, bullet) in esper.get_components(Position, Hitbox, Bullet):
            if bullet.from_player or not esper.entity_exists(b):
                continue
            if rect_collision(bhb.rect(bpos), prect):
                esper.delete_entity(b)
                if self._hurt_player(pos, ship, bullet.damage):
                    return True
        return False

    def _enemies_vs_player(self, pos: Position, hb: Hitbox, ship: PlayerShip) -> bool:
        pcircle = hb.circle(pos)
        for e, (epos, ehb, enemy) in alive_enemies():
            if not circle_collision(pcircle, ehb.circle(epos)):
                continue
            over = self._hurt_player(pos, ship, 1)
            enemy.take_damage(999)
            spawn_explosion(self.ctx.rng, epos.x, epos.y)
            esper.delete_entity(e)
            return over
        return False

    def _powerups_vs_player(self, pos: Position, hb: Hitbox, ship: PlayerShip) -> None:
        prect = hb.rect(pos)
        for e, (upos, uhb, pu) in esper.get_components(Position, Hitbox, PowerUp):
            if not esper.entity_exists(e) or not rect_collision(uhb.rect(upos), prect):
                continue
            esper.delete_entity(e)
            apply_powerup(self.ctx, ship, pu.kind, pu.duration_ms)
            self.ctx.stats.powerups_collected += 1
            self.ctx.cue("powerup")
            spawn_stars(self.ctx.rng, pos.x, pos.y)
            for key in progress_achievements(self.ctx.stats):
                self.ctx.unlock(key)

    def _hurt_player(self, pos: Position, ship: PlayerShip, damage: int) -> bool:
        """Apply a hit to the player. True when the run is over."""
        landed = not ship.invulnerable
        if ship.take_damage(damage):
            return self._player_death(pos, ship)
        if landed:
            self.ctx.cue("playerHit")
            spawn_sparks(self.ctx.rng, pos.x, pos.y)
            self.ctx.stats.reset_combo()
        return False

    def _player_death(self, pos: Position, ship: PlayerShip) -> bool:
        spawn_explosion(self.ctx.rng, pos.x, pos.y, 20)
        spawn_smoke(self.ctx.rng, pos.x, pos.y)
        self.ctx.cue("explosion")
        self.ctx.stats.reset_combo()
        if ship.respawn(pos, self.ctx.spawn_x, self.ctx.spawn_y):
            spawn_stars(self.ctx.rng, pos.x, pos.y, 15)
            logger.info("Player respawned, %d lives left", ship.lives)
            return False
        self.ctx.game_over_reason = "death"
        return True


class LevelSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.paused or self.ctx.game_over_reason is not None:
            return
        stats = self.ctx.stats
        target = stats.level_for_score()
        if target <= stats.level:
            return
        comps = player_components(self.ctx)
        while stats.level < target:
            stats.level += 1
            self.ctx.cue("levelUp")
            self.ctx.notify("Level %d", stats.level)
            if comps is not None:
                comps[2].heal(1)
                spawn_stars(self.ctx.rng, comps[0].x, comps[0].y, 20)
            if stats.level % 5 == 0:
                self.ctx.boss_warning_requested = True
        logger.info("Reached level %d", stats.level)
