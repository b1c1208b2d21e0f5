import esper

from starfighter.ecs_components import PlayerShip
from starfighter.ecs_systems import LevelSystem, TimerSystem
from starfighter.scoring import (
    COMBO_WINDOW_TICKS,
    Achievements,
    RunStats,
    final_achievements,
    progress_achievements,
)


def test_combo_bonus_starts_on_second_kill():
    stats = RunStats()
    assert stats.register_kill(100) == 100
    assert stats.register_kill(100) == 120
    assert stats.register_kill(100) == 130
    assert stats.combo == 3
    assert stats.max_combo == 3
    assert stats.score == 350


def test_combo_lapses_after_window():
    stats = RunStats()
    stats.register_kill(100)
    for _ in range(COMBO_WINDOW_TICKS - 1):
        assert stats.tick_combo() is False
    assert stats.tick_combo() is True
    assert stats.combo == 0
    assert stats.max_combo == 1


def test_accuracy_rounds_to_percent():
    stats = RunStats(shots=3, hits=2)
    assert stats.accuracy == 67
    assert RunStats().accuracy == 0


def test_level_for_score():
    assert RunStats(score=0).level_for_score() == 1
    assert RunStats(score=1999).level_for_score() == 1
    assert RunStats(score=4000).level_for_score() == 3


def test_progress_and_final_achievements():
    stats = RunStats(kills=1, combo=10, powerups_collected=50)
    assert set(progress_achievements(stats)) == {"first_kill", "combo10", "collector"}
    assert final_achievements(RunStats(elapsed_ms=300_000, shots=10, hits=9)) == ["survivor", "marksman"]
    assert final_achievements(RunStats(elapsed_ms=1000, shots=0, hits=0)) == []


def test_achievements_unlock_once_in_order():
    got = Achievements()
    assert got.unlock("combo10")
    assert got.unlock("first_kill")
    assert not got.unlock("combo10")
    assert got.as_list() == ["combo10", "first_kill"]
    assert len(got) == 2


def test_context_unlock_notifies_once(ctx):
    ctx.achievement_defs = {"first_kill": {"name": "First Blood"}}
    assert ctx.unlock("first_kill")
    assert not ctx.unlock("first_kill")
    assert ctx.events == ["Achievement: First Blood"]
    assert ctx.audio.count("levelUp") == 1


def test_level_up_heals_and_requests_boss_warning(ctx, player):
    ship = esper.component_for_entity(player, PlayerShip)
    ship.health = 1
    ctx.stats.score = 8000
    LevelSystem(ctx).process(0.016)
    assert ctx.stats.level == 5
    assert ship.health == ship.max_health
    assert ctx.boss_warning_requested
    assert ctx.audio.count("levelUp") == 4
    assert "Level 5" in ctx.events


def test_timer_tracks_survival_and_time_scale(ctx):
    timer = TimerSystem(ctx)
    ctx.effects.set("time_slow", 5000)
    timer.process(0.016)
    assert ctx.stats.frames == 1
    assert ctx.stats.elapsed_ms == 16
    assert ctx.time_scale == 0.5
    ctx.effects.clear()
    timer.process(0.016)
    assert ctx.time_scale == 1.0


def test_paused_context_freezes_timer(ctx):
    ctx.paused = True
    TimerSystem(ctx).process(0.016)
    assert ctx.stats.frames == 0


def test_five_quick_kills_stack_combo_bonus():
    stats = RunStats()
    for _ in range(5):
        stats.register_kill(100)
        for _ in range(100):
            stats.tick_combo()
    assert stats.combo == 5
    assert stats.score == 5 * 100 + (2 + 3 + 4 + 5) * 10
