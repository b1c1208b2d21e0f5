import esper
import pytest

from starfighter.content import SkillKind, UnknownVariantError
from starfighter.controls import InputState
from starfighter.ecs_components import PlayerShip
from starfighter.factories import create_enemy_bullet
from starfighter.game import BOSS_WARNING_MS, GameState


def player_ship(game) -> PlayerShip:
    return esper.component_for_entity(game.ctx.player, PlayerShip)


def test_tick_before_start_does_nothing(make_game):
    game = make_game()
    assert game.tick() is GameState.START
    assert game.ctx.stats.frames == 0


def test_start_spawns_player_at_bottom_center(make_game):
    game = make_game()
    game.start()
    snap = game.snapshot()
    assert game.state is GameState.PLAYING
    assert (snap.player.x, snap.player.y) == (300, 700)
    assert snap.hud.lives == 3
    assert snap.hud.skills == {"super_shot": 0.0, "time_warp": 0.0, "energy_shield": 0.0, "clear_bomb": 0.0}


def test_start_applies_difficulty(make_game):
    game = make_game()
    game.start("nightmare")
    assert player_ship(game).lives == 1
    assert game.snapshot().hud.difficulty == "Nightmare"


def test_tick_advances_simulation(make_game):
    game = make_game()
    game.start()
    for _ in range(15):
        game.tick()
    assert game.ctx.stats.frames == 15
    assert game.ctx.stats.elapsed_ms == 15 * 16
    assert len(game.snapshot().bullets) == 1


def test_pause_freezes_and_resumes(make_game):
    game = make_game()
    game.start()
    assert game.tick(InputState(pause=True)) is GameState.PAUSED
    game.tick()
    assert game.ctx.stats.frames == 0
    assert game.tick(InputState(pause=True)) is GameState.PLAYING
    assert game.ctx.stats.frames == 1


def test_skill_input_triggers_skill(make_game, audio):
    game = make_game()
    game.start()
    game.tick(InputState(skills=("super_shot",)))
    assert game.ctx.stats.shots == 9
    assert not game.ctx.skills.ready(SkillKind.SUPER_SHOT)
    assert audio.count("powerup") == 1


def test_energy_shield_skill_doubles_shield(make_game):
    game = make_game()
    game.start()
    assert game.use_skill("energy_shield")
    assert player_ship(game).shield == 6
    assert not game.use_skill("energy_shield")


def test_time_warp_slows_world(make_game):
    game = make_game()
    game.start()
    game.use_skill("time_warp")
    game.tick()
    assert game.ctx.time_scale == pytest.approx(0.3)


def test_unknown_skill_is_ignored_unless_strict(make_game):
    game = make_game()
    game.start()
    assert game.use_skill("nuke") is False
    strict = make_game(strict=True)
    strict.start()
    with pytest.raises(UnknownVariantError):
        strict.use_skill("nuke")


def test_quit_ends_run_and_saves_record_once(make_game):
    game = make_game()
    game.start()
    for _ in range(10):
        game.tick()
    assert game.tick(InputState(quit=True)) is GameState.GAME_OVER
    game.quit()
    assert game.last_record is not None
    assert game.last_record.end_reason == "quit"
    assert len(game.records.all_records()) == 1
    assert game.tick() is GameState.GAME_OVER


def test_death_ends_run(make_game):
    game = make_game()
    game.start()
    ship = player_ship(game)
    ship.health = 1
    ship.lives = 0
    create_enemy_bullet(game.ctx.spawn_x, game.ctx.spawn_y, 0, 0)
    assert game.tick() is GameState.GAME_OVER
    assert game.end_reason == "death"
    summary = game.summary()
    assert summary.end_reason == "death"
    assert summary.lives_remaining == 0
    assert game.records.all_records()[0].end_reason == "death"


def test_level_five_triggers_boss_warning(make_game, audio):
    game = make_game()
    game.start()
    game.ctx.stats.score = 8000
    assert game.tick() is GameState.BOSS_WARNING
    assert audio.count("bossAppear") == 1
    ticks = -(-BOSS_WARNING_MS // game.ctx.frame_ms)
    for _ in range(ticks - 1):
        assert game.tick() is GameState.BOSS_WARNING
    assert game.ctx.stats.frames == 1
    assert game.tick() is GameState.PLAYING
    game.tick()
    assert game.ctx.stats.frames == 2


def test_restart_resets_everything(make_game):
    game = make_game()
    game.start()
    game.use_skill("super_shot")
    for _ in range(30):
        game.tick()
    game.start()
    snap = game.snapshot()
    assert game.ctx.stats.frames == 0
    assert game.ctx.stats.shots == 0
    assert snap.bullets == ()
    assert game.ctx.skills.ready(SkillKind.SUPER_SHOT)


def test_high_score_tracks_best_run(make_game):
    game = make_game()
    game.start()
    game.ctx.stats.score = 1500
    game.tick()
    game.quit()
    game.start()
    assert game.snapshot().hud.high_score == 1500


def test_games_use_separate_worlds(make_game):
    first = make_game()
    second = make_game()
    first.start()
    second.start()
    for _ in range(20):
        first.tick()
    assert second.ctx.stats.frames == 0
    assert second.snapshot().bullets == ()
    assert len(first.snapshot().bullets) >= 1
