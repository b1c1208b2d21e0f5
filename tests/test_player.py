import esper

from starfighter.content import BulletKind, DifficultyPreset
from starfighter.controls import InputState
from starfighter.ecs_components import Bullet, PlayerShip, Position
from starfighter.ecs_systems import PlayerControlSystem, weapon_volley


def test_damage_goes_to_energy_shield_then_shield_then_health():
    ship = PlayerShip(energy_shield=1, shield=2)
    assert ship.take_damage(3) is False
    assert (ship.energy_shield, ship.shield, ship.health) == (0, 2, 3)
    assert ship.invulnerable

    ship.invulnerable_timer = 0
    ship.take_damage(1)
    assert (ship.shield, ship.health) == (1, 3)

    ship.invulnerable_timer = 0
    ship.shield = 0
    ship.take_damage(1)
    assert ship.health == 2


def test_invulnerable_ship_ignores_hits():
    ship = PlayerShip()
    ship.start_invulnerability()
    assert ship.take_damage(5) is False
    assert ship.health == 3


def test_lethal_hit_reports_death_and_respawn_resets_ship():
    ship = PlayerShip(health=1, lives=1, weapon_level=4, shield=0)
    assert ship.take_damage(1) is True
    pos = Position(10, 10)
    assert ship.respawn(pos, 300, 700) is True
    assert ship.lives == 0
    assert ship.health == ship.max_health
    assert ship.weapon_level == 1
    assert (pos.x, pos.y) == (300, 700)
    assert ship.invulnerable

    ship.invulnerable_timer = 0
    ship.health = 1
    ship.take_damage(1)
    assert ship.respawn(pos, 300, 700) is False


def test_heal_and_upgrade_are_capped():
    ship = PlayerShip(health=2)
    ship.heal(5)
    assert ship.health == ship.max_health
    for _ in range(10):
        ship.upgrade_weapon()
    assert ship.weapon_level == ship.max_weapon_level


def test_weapon_kind_follows_level():
    assert PlayerShip(weapon_level=1).weapon_kind is BulletKind.NORMAL
    assert PlayerShip(weapon_level=3).weapon_kind is BulletKind.PLASMA
    assert PlayerShip(weapon_level=4).weapon_kind is BulletKind.LASER


def test_weapon_volley_sizes():
    for level, count in [(1, 1), (2, 2), (3, 3), (4, 4), (5, 5)]:
        shots = weapon_volley(PlayerShip(weapon_level=level), 100, 100)
        assert len(shots) == count
    spread = weapon_volley(PlayerShip(weapon_level=5), 100, 100)
    assert {s.kind for s in spread} == {BulletKind.LASER}
    assert len({round(s.vx, 3) for s in spread}) == 5


def test_multi_shot_bonus_is_capped():
    ship = PlayerShip(weapon_level=5, bonus_pattern=1)
    assert ship.pattern_level == 5
    ship = PlayerShip(weapon_level=2, bonus_pattern=1)
    assert ship.pattern_level == 3


def test_player_moves_toward_target_and_snaps(ctx, player):
    system = PlayerControlSystem(ctx)
    ctx.auto_fire = False
    pos = esper.component_for_entity(player, Position)
    start_y = pos.y
    ctx.input = InputState(target=(pos.x, start_y - 100))
    system.process(0.016)
    assert pos.y == start_y - 5
    ctx.input = InputState()
    for _ in range(30):
        system.process(0.016)
    assert pos.y == start_y - 100


def test_directional_input_moves_player(ctx, player):
    system = PlayerControlSystem(ctx)
    ctx.auto_fire = False
    pos = esper.component_for_entity(player, Position)
    x = pos.x
    ctx.input = InputState(right=True)
    system.process(0.016)
    assert pos.x == x + 5


def test_player_is_kept_on_screen(ctx, player):
    system = PlayerControlSystem(ctx)
    pos = esper.component_for_entity(player, Position)
    pos.x = -100
    pos.y = 5000
    ship = esper.component_for_entity(player, PlayerShip)
    ship.target_x, ship.target_y = pos.x, pos.y
    system.process(0.016)
    assert pos.x == 20
    assert pos.y == ctx.height - 25


def test_auto_fire_respects_interval(ctx, player):
    system = PlayerControlSystem(ctx)
    for _ in range(15):
        system.process(0.016)
    bullets = [b for _, b in esper.get_component(Bullet)]
    assert len(bullets) == 1
    assert bullets[0].from_player
    assert ctx.stats.shots == 1
    assert ctx.audio.count("shoot") == 1


def test_manual_fire_needs_shoot_flag(ctx, player):
    ctx.auto_fire = False
    system = PlayerControlSystem(ctx)
    for _ in range(20):
        system.process(0.016)
    assert esper.get_components(Bullet) == []
    ctx.input = InputState(shoot=True)
    system.process(0.016)
    assert len(esper.get_components(Bullet)) == 1


def test_difficulty_sets_starting_lives(ctx):
    from starfighter.factories import create_player

    e = create_player(ctx.gameplay, DifficultyPreset("easy", "Easy", starting_lives=5), (0, 0))
    assert esper.component_for_entity(e, PlayerShip).lives == 5


def test_energy_shield_swallows_oversized_hit():
    ship = PlayerShip(energy_shield=2, shield=0, health=3)
    assert ship.take_damage(5) is False
    assert ship.energy_shield == 0
    assert not ship.has_energy_shield
    assert ship.health == 3


def test_player_steps_full_speed_even_past_a_near_target(ctx, player):
    system = PlayerControlSystem(ctx)
    ctx.auto_fire = False
    pos = esper.component_for_entity(player, Position)
    start_y = pos.y
    ctx.input = InputState(target=(pos.x, start_y - 3))
    system.process(0.016)
    assert pos.y == start_y - 5
    ctx.input = InputState()
    system.process(0.016)
    assert pos.y == start_y - 3
