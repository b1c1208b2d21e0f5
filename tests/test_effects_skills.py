import pytest

from starfighter.content import SkillKind, UnknownVariantError, resolve_skill
from starfighter.effects import ActiveEffects
from starfighter.skills import SkillBook


def test_effect_refresh_replaces_remaining_time():
    fx = ActiveEffects()
    fx.set("speed", 6000)
    fx.tick(5000)
    fx.set("speed", 6000)
    assert fx.remaining("speed") == 6000


def test_zero_duration_is_ignored():
    fx = ActiveEffects()
    fx.set("health", 0)
    assert "health" not in fx
    assert len(fx) == 0


def test_tick_reports_expired_effects():
    fx = ActiveEffects()
    fx.set("speed", 100)
    fx.set("rapid_fire", 300)
    assert fx.tick(100) == ["speed"]
    assert list(fx) == ["rapid_fire"]
    assert fx.items() == [("rapid_fire", 200.0)]


def test_consume_pickup_fires_once_per_set():
    fx = ActiveEffects()
    fx.set("shield", 8000)
    assert fx.consume_pickup("shield")
    assert not fx.consume_pickup("shield")
    fx.set("shield", 8000)
    assert fx.consume_pickup("shield")


def test_skill_cooldown_blocks_retrigger():
    book = SkillBook()
    assert book.trigger(SkillKind.SUPER_SHOT)
    assert not book.trigger(SkillKind.SUPER_SHOT)
    assert book[SkillKind.SUPER_SHOT].cooldown_fraction == 1.0
    book.tick(5000)
    assert book[SkillKind.SUPER_SHOT].cooldown_fraction == pytest.approx(0.5)
    book.tick(5000)
    assert book.ready(SkillKind.SUPER_SHOT)
    assert book.trigger(SkillKind.SUPER_SHOT)


def test_time_warp_has_duration():
    book = SkillBook()
    book.trigger(SkillKind.TIME_WARP)
    assert book.active(SkillKind.TIME_WARP)
    assert book.tick(2000) == []
    assert book.tick(1000) == [SkillKind.TIME_WARP]
    assert not book.active(SkillKind.TIME_WARP)
    assert not book.ready(SkillKind.TIME_WARP)


def test_skills_are_independent():
    book = SkillBook()
    book.trigger(SkillKind.CLEAR_BOMB)
    assert book.ready(SkillKind.ENERGY_SHIELD)
    book.reset()
    assert book.ready(SkillKind.CLEAR_BOMB)


def test_resolve_skill_strictness():
    assert resolve_skill("clear_bomb") is SkillKind.CLEAR_BOMB
    assert resolve_skill("nuke") is None
    with pytest.raises(UnknownVariantError):
        resolve_skill("nuke", strict=True)
