from __future__ import annotations

import itertools
import random
from collections import defaultdict
from datetime import datetime, timedelta

import esper
import pytest

from starfighter.audio import RecordingAudio
from starfighter.config import default_settings
from starfighter.content import Content
from starfighter.context import GameContext
from starfighter.factories import create_player
from starfighter.game import Game
from starfighter.records import RecordStore

_names = itertools.count(1)


@pytest.fixture
def world():
    name = f"test-world-{next(_names)}"
    esper.switch_world(name)
    yield name
    esper.switch_world("default")
    esper.delete_world(name)


@pytest.fixture
def audio() -> RecordingAudio:
    return RecordingAudio()


@pytest.fixture
def ctx(world, audio) -> GameContext:
    return GameContext(rng=random.Random(7), audio=audio)


@pytest.fixture
def player(ctx) -> int:
    ctx.player = create_player(ctx.gameplay, ctx.difficulty, (ctx.spawn_x, ctx.spawn_y))
    return ctx.player


@pytest.fixture
def no_keys():
    return defaultdict(bool)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 20, 0, 0))


@pytest.fixture
def store(tmp_path, clock) -> RecordStore:
    return RecordStore(tmp_path / "records.json", max_records=100, clock=clock)


@pytest.fixture
def make_game(tmp_path, audio):
    games = []

    def factory(**gameplay):
        settings = default_settings()
        settings.gameplay.seed = 11
        for key, value in gameplay.items():
            setattr(settings.gameplay, key, value)
        records = RecordStore(tmp_path / "game-records.json")
        game = Game(settings, Content(base_dir=tmp_path), audio, records)
        games.append(game)
        return game

    yield factory
    for game in games:
        game.close()
