from __future__ import annotations

import itertools
import random
from enum import Enum
from typing import Optional

import esper

from .ai import BossBrain
from .audio import AudioCues, NullAudio
from .config import Settings, default_settings, load_settings
from .content import Content, SkillKind, resolve_skill
from .context import GameContext, WaveState
from .controls import InputState
from .ecs_components import Bullet, Enemy, Hitbox, Particle, PlayerShip, Position, PowerUp, Stealth, Trail
from .ecs_systems import (
    BulletSystem,
    CollisionSystem,
    EnemyAISystem,
    EnemySpawnSystem,
    LevelSystem,
    ParticleSystem,
    PlayerControlSystem,
    PowerUpSystem,
    TimerSystem,
    clear_bomb,
    fire_super_shot,
    player_components,
)
from .factories import create_player
from .logger import get_logger, setup_logger
from .records import RecordStore, RunRecord, RunSummary
from .scoring import final_achievements
from .snapshot import BulletView, EnemyView, HudView, ParticleView, PlayerView, PowerUpView, WorldSnapshot

logger = get_logger(__name__)

BOSS_WARNING_MS = 3000

PIPELINE = (
    (TimerSystem, 100),
    (PlayerControlSystem, 90),
    (BulletSystem, 80),
    (EnemyAISystem, 70),
    (EnemySpawnSystem, 60),
    (PowerUpSystem, 50),
    (ParticleSystem, 40),
    (CollisionSystem, 30),
    (LevelSystem, 20),
)

_world_ids = itertools.count(1)


class GameState(str, Enum):
    START = "start"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"
    BOSS_WARNING = "boss_warning"


class Game:
    """One play session: owns an esper world and drives it one tick at a time."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        content: Optional[Content] = None,
        audio: Optional[AudioCues] = None,
        records: Optional[RecordStore] = None,
    ) -> None:
        self.settings = settings or default_settings()
        self.content = content or Content(strict=self.settings.gameplay.strict)
        self.audio = audio or NullAudio()
        self.records = records
        self.world_name = f"starfighter-{next(_world_ids)}"
        self.state = GameState.START
        self.boss_warning_ms = 0.0
        self.last_record: Optional[RunRecord] = None
        self.end_reason: Optional[str] = None
        self._flushed = False
        self.high_score = self._stored_high_score()
        self._activate()
        self.ctx = self._new_context()

    def _activate(self) -> None:
        esper.switch_world(self.world_name)

    def _stored_high_score(self) -> int:
        if self.records is None:
            return 0
        try:
            return self.records.high_score()
        except Exception:
            logger.warning("Could not read high score", exc_info=True)
            return 0

    def _new_context(self, difficulty: Optional[str] = None) -> GameContext:
        gp = self.settings.gameplay
        preset = self.content.difficulty(difficulty or gp.difficulty)
        rng = random.Random(gp.seed) if gp.seed is not None else random.Random()
        return GameContext(
            rng=rng,
            width=self.settings.window.width,
            height=self.settings.window.height,
            frame_ms=gp.frame_ms,
            strict=gp.strict,
            auto_fire=gp.auto_fire,
            gameplay=gp,
            spawning=self.settings.spawning,
            difficulty=preset,
            audio=self.audio,
            wave=WaveState(quota=self.settings.spawning.wave_quota_base, spawn_interval=self.settings.spawning.base_interval),
            achievement_defs=dict(self.content.achievements),
        )

    def start(self, difficulty: Optional[str] = None) -> None:
        """Reset every piece of session state and begin a fresh run."""
        self._activate()
        esper.clear_database()
        for cls, _ in PIPELINE:
            esper.remove_processor(cls)
        self.ctx = self._new_context(difficulty)
        self.ctx.player = create_player(self.settings.gameplay, self.ctx.difficulty, (self.ctx.spawn_x, self.ctx.spawn_y))
        for cls, priority in PIPELINE:
            esper.add_processor(cls(self.ctx), priority=priority)
        self.state = GameState.PLAYING
        self.boss_warning_ms = 0.0
        self.last_record = None
        self.end_reason = None
        self._flushed = False
        self.high_score = max(self.high_score, self._stored_high_score())
        logger.info("Run started on %s", self.ctx.difficulty.key)

    def tick(self, inp: Optional[InputState] = None) -> GameState:
        self._activate()
        inp = inp or InputState()
        if self.state in (GameState.START, GameState.GAME_OVER):
            return self.state
        if inp.quit:
            self.quit()
            return self.state
        if inp.pause and self.state in (GameState.PLAYING, GameState.PAUSED):
            self.toggle_pause()
        if self.state is GameState.PAUSED:
            return self.state
        if self.state is GameState.BOSS_WARNING:
            self.boss_warning_ms -= self.ctx.frame_ms
            if self.boss_warning_ms <= 0:
                self.boss_warning_ms = 0.0
                self.state = GameState.PLAYING
            return self.state

        for name in inp.skills:
            self.use_skill(name)
        self.ctx.input = inp
        esper.process(self.ctx.frame_ms / 1000.0)
        self.high_score = max(self.high_score, self.ctx.stats.score)

        if self.ctx.game_over_reason is not None:
            self._end_run(self.ctx.game_over_reason)
        elif self.ctx.boss_warning_requested:
            self.ctx.boss_warning_requested = False
            self.state = GameState.BOSS_WARNING
            self.boss_warning_ms = float(BOSS_WARNING_MS)
            self.ctx.cue("bossAppear")
            self.ctx.notify("Warning: boss approaching")
        return self.state

    def pause(self) -> None:
        if self.state is GameState.PLAYING:
            self.state = GameState.PAUSED
            self.ctx.paused = True

    def resume(self) -> None:
        if self.state is GameState.PAUSED:
            self.state = GameState.PLAYING
            self.ctx.paused = False

    def toggle_pause(self) -> None:
        if self.state is GameState.PAUSED:
            self.resume()
        else:
            self.pause()

    def use_skill(self, name: str | SkillKind) -> bool:
        self._activate()
        if self.state is not GameState.PLAYING:
            return False
        kind = resolve_skill(name, strict=self.ctx.strict)
        if kind is None or not self.ctx.skills.trigger(kind):
            return False
        if kind is SkillKind.SUPER_SHOT:
            fire_super_shot(self.ctx)
        elif kind is SkillKind.TIME_WARP:
            self.ctx.time_scale = 0.3
        elif kind is SkillKind.ENERGY_SHIELD:
            comps = player_components(self.ctx)
            if comps is not None:
                ship = comps[2]
                ship.grant_shield(ship.max_shield * 2)
        elif kind is SkillKind.CLEAR_BOMB:
            cleared = clear_bomb(self.ctx)
            logger.debug("Clear bomb destroyed %d enemies", cleared)
        self.ctx.cue("powerup")
        logger.debug("Skill %s used", kind.value)
        return True

    def quit(self) -> None:
        if self.state in (GameState.PLAYING, GameState.PAUSED, GameState.BOSS_WARNING):
            self._activate()
            self._end_run("quit")

    def _end_run(self, reason: str) -> None:
        if self._flushed:
            return
        self._flushed = True
        self.state = GameState.GAME_OVER
        self.ctx.paused = False
        self.end_reason = reason
        for key in final_achievements(self.ctx.stats):
            self.ctx.unlock(key)
        self.high_score = max(self.high_score, self.ctx.stats.score)
        summary = self.summary()
        logger.info("Run over (%s): score %d, kills %d", reason, summary.score, summary.kills)
        if self.records is None:
            return
        try:
            self.last_record = self.records.append(summary)
        except Exception:
            logger.exception("Could not save run record")

    def summary(self) -> RunSummary:
        stats = self.ctx.stats
        comps = player_components(self.ctx) if self.state is not GameState.START else None
        lives = comps[2].lives if comps is not None else 0
        return RunSummary(
            score=stats.score,
            kills=stats.kills,
            survival_time_ms=stats.elapsed_ms,
            shots=stats.shots,
            hits=stats.hits,
            max_combo=stats.max_combo,
            difficulty=self.ctx.difficulty.key,
            achievements=self.ctx.achievements.as_list(),
            end_reason=self.end_reason or "unknown",
            lives_remaining=lives,
            level=stats.level,
            high_score=self.high_score,
        )

    def drain_events(self) -> list[str]:
        out = list(self.ctx.events)
        self.ctx.events.clear()
        return out

    def snapshot(self) -> WorldSnapshot:
        self._activate()
        player_view = None
        comps = player_components(self.ctx)
        if comps is not None:
            pos, hb, ship = comps
            trail = esper.try_component(self.ctx.player, Trail)
            player_view = PlayerView(
                x=pos.x,
                y=pos.y,
                width=hb.width,
                height=hb.height,
                health=ship.health,
                max_health=ship.max_health,
                lives=ship.lives,
                weapon_level=ship.weapon_level,
                shield=ship.shield,
                energy_shield=ship.energy_shield,
                invulnerable=ship.invulnerable,
                animation_frame=ship.animation_frame,
                trail=tuple(trail.points) if trail else (),
            )

        enemies = []
        for e, (pos, hb, enemy) in esper.get_components(Position, Hitbox, Enemy):
            if not esper.entity_exists(e) or enemy.dead:
                continue
            stealth = esper.try_component(e, Stealth)
            brain = esper.try_component(e, BossBrain)
            trail = esper.try_component(e, Trail)
            enemies.append(EnemyView(
                x=pos.x,
                y=pos.y,
                width=hb.width,
                height=hb.height,
                kind=enemy.kind.value,
                health_fraction=enemy.health_fraction,
                alpha=stealth.alpha if stealth else 1.0,
                boss_state=brain.state.value if brain else None,
                trail=tuple(trail.points) if trail else (),
            ))

        bullets = []
        for e, (pos, hb, bullet, trail) in esper.get_components(Position, Hitbox, Bullet, Trail):
            if esper.entity_exists(e):
                bullets.append(BulletView(pos.x, pos.y, hb.width, hb.height, bullet.kind.value, bullet.from_player, tuple(trail.points)))

        powerups = [
            PowerUpView(pos.x, pos.y, hb.width, hb.height, pu.kind.value, pu.bob)
            for e, (pos, hb, pu) in esper.get_components(Position, Hitbox, PowerUp)
            if esper.entity_exists(e)
        ]
        particles = [
            ParticleView(pos.x, pos.y, p.size, p.color, p.alpha)
            for e, (pos, p) in esper.get_components(Position, Particle)
            if esper.entity_exists(e)
        ]

        stats = self.ctx.stats
        ship: Optional[PlayerShip] = comps[2] if comps is not None else None
        hud = HudView(
            state=self.state.value,
            score=stats.score,
            high_score=self.high_score,
            kills=stats.kills,
            combo=stats.combo,
            wave=self.ctx.wave.wave,
            level=stats.level,
            lives=ship.lives if ship else 0,
            health=ship.health if ship else 0,
            max_health=ship.max_health if ship else 0,
            accuracy=stats.accuracy,
            elapsed_ms=stats.elapsed_ms,
            time_scale=self.ctx.time_scale,
            difficulty=self.ctx.difficulty.name,
            effects=dict(self.ctx.effects.items()),
            skills={kind.value: skill.cooldown_fraction for kind, skill in self.ctx.skills.skills.items()},
            boss_warning_ms=self.boss_warning_ms,
        )
        return WorldSnapshot(
            width=self.ctx.width,
            height=self.ctx.height,
            player=player_view,
            enemies=tuple(enemies),
            bullets=tuple(bullets),
            powerups=tuple(powerups),
            particles=tuple(particles),
            hud=hud,
        )

    def close(self) -> None:
        esper.switch_world("default")
        esper.delete_world(self.world_name)


def run_game() -> None:
    setup_logger()
    settings = load_settings()
    import pygame

    pygame.init()
    screen = pygame.display.set_mode((settings.window.width, settings.window.height))
    pygame.display.set_caption(settings.window.title)

    from .audio import ToneAudio
    from .controls import InputPoller
    from .menu import run_game_over, run_start_menu
    from .render import Renderer
    from .ui import GameUI

    content = Content(strict=settings.gameplay.strict)
    records = RecordStore(settings.records.path, settings.records.max_records)
    game = Game(settings, content, ToneAudio(), records)
    renderer = Renderer(screen)
    clock = pygame.time.Clock()

    while True:
        difficulty = run_start_menu(screen, settings, content, records)
        if difficulty is None:
            break
        game.start(difficulty)
        ui = GameUI(settings.window.width, settings.window.height)
        poller = InputPoller()
        closed = False

        while game.state is not GameState.GAME_OVER:
            dt = clock.tick(settings.window.fps) / 1000.0
            events = pygame.event.get()
            for event in events:
                ui.process_event(event)
                action = ui.handle_ui_event(event)
                if action == "resume":
                    game.resume()
                elif action == "quit_run":
                    game.quit()
                if event.type == pygame.QUIT:
                    closed = True
            inp = poller.poll(events)
            game.tick(inp)

            if game.state is GameState.PAUSED:
                ui.open_pause()
            else:
                ui.close_pause()
            for message in game.drain_events():
                ui.show_banner(message)

            snap = game.snapshot()
            renderer.draw(snap)
            ui.update_hud(snap.hud)
            ui.update(dt)
            ui.draw(screen)
            pygame.display.flip()

        if closed:
            break
        if not run_game_over(screen, settings, game.last_record, game.summary()):
            break

    game.close()
    pygame.quit()
