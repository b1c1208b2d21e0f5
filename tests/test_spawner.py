import esper
import pytest

from starfighter.content import EnemyKind
from starfighter.ecs_components import Enemy, Position, PowerUp
from starfighter.ecs_systems import EnemySpawnSystem, PowerUpSystem, alive_enemies, pick_enemy_kind


@pytest.mark.parametrize(
    "wave, roll, kind",
    [
        (1, 0.0, EnemyKind.BASIC),
        (1, 0.99, EnemyKind.BASIC),
        (2, 0.1, EnemyKind.SHOOTER),
        (2, 0.3, EnemyKind.FAST),
        (2, 0.5, EnemyKind.BASIC),
        (3, 0.05, EnemyKind.HEAVY),
        (3, 0.45, EnemyKind.ZIGZAG),
        (4, 0.8, EnemyKind.BASIC),
        (5, 0.01, EnemyKind.STEALTH),
        (7, 0.6, EnemyKind.FAST),
    ],
)
def test_pick_enemy_kind_by_wave(wave, roll, kind):
    assert pick_enemy_kind(wave, roll) is kind


def test_spawns_on_interval_until_quota(ctx):
    system = EnemySpawnSystem(ctx)
    for _ in range(119):
        system.process(0.016)
    assert alive_enemies() == []
    system.process(0.016)
    assert len(alive_enemies()) == 1
    assert ctx.wave.spawned == 1
    # wave 1 interval drops to base - 10
    assert ctx.wave.spawn_interval == 110


def test_spawned_enemies_enter_from_above(ctx):
    e = EnemySpawnSystem(ctx).spawn_regular()
    pos = esper.component_for_entity(e, Position)
    assert pos.y == -30
    assert 50 <= pos.x <= ctx.width - 50


def test_alive_cap_blocks_spawning(ctx):
    ctx.spawning.max_alive = 2
    ctx.wave.quota = 10
    system = EnemySpawnSystem(ctx)
    system.spawn_regular()
    system.spawn_regular()
    ctx.wave.spawn_timer = 10_000
    system.process(0.016)
    assert len(alive_enemies()) == 2


def test_wave_advances_when_quota_met_and_field_clear(ctx):
    ctx.wave.spawned = ctx.wave.quota
    system = EnemySpawnSystem(ctx)
    system.process(0.016)
    assert ctx.wave.wave == 2
    assert ctx.wave.spawned == 0
    assert ctx.wave.quota == 6
    assert "Wave 2" in ctx.events


def test_wave_waits_for_live_enemies(ctx):
    system = EnemySpawnSystem(ctx)
    system.spawn_regular()
    ctx.wave.spawned = ctx.wave.quota
    system.process(0.016)
    assert ctx.wave.wave == 1


def test_quota_is_capped():
    from starfighter.context import GameContext

    ctx = GameContext()
    system = EnemySpawnSystem(ctx)
    ctx.wave.wave = 30
    system.next_wave()
    assert ctx.wave.quota == 10


def test_boss_wave_spawns_boss_before_advancing(ctx):
    ctx.wave.wave = 5
    ctx.wave.spawned = ctx.wave.quota
    system = EnemySpawnSystem(ctx)
    system.process(0.016)
    bosses = [enemy for _, (_, _, enemy) in alive_enemies() if enemy.kind is EnemyKind.BOSS]
    assert len(bosses) == 1
    assert ctx.wave.boss_spawned
    assert ctx.audio.count("bossAppear") == 1
    # boss still alive, so the wave holds
    system.process(0.016)
    assert ctx.wave.wave == 5

    for e, (_, _, enemy) in alive_enemies():
        enemy.take_damage(enemy.health)
        esper.delete_entity(e, immediate=True)
    system.process(0.016)
    assert ctx.wave.wave == 6
    assert not ctx.wave.boss_spawned


def test_powerup_drops_on_timer_and_drifts(ctx):
    ctx.spawning.powerup_interval = 3
    system = PowerUpSystem(ctx)
    for _ in range(3):
        system.process(0.016)
    pickups = esper.get_components(PowerUp)
    assert len(pickups) == 1
    assert ctx.powerup_timer == 0


def test_powerup_system_ticks_effects(ctx):
    ctx.effects.set("speed", 40)
    system = PowerUpSystem(ctx)
    system.process(0.016)
    system.process(0.016)
    assert ctx.effects.has("speed")
    system.process(0.016)
    assert not ctx.effects.has("speed")


def test_dead_enemies_are_not_counted(ctx):
    system = EnemySpawnSystem(ctx)
    e = system.spawn_regular()
    esper.component_for_entity(e, Enemy).take_damage(99)
    assert alive_enemies() == []


def test_clearing_first_wave_starts_second(ctx):
    system = EnemySpawnSystem(ctx)
    for _ in range(2000):
        system.process(0.016)
        if ctx.wave.spawned == 5:
            break
    assert ctx.wave.spawned == 5
    for e, (_, _, enemy) in alive_enemies():
        enemy.take_damage(999)
    system.process(0.016)
    assert ctx.wave.wave == 2
    assert ctx.wave.quota == 6
