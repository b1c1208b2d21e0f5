import math
import random

import pytest

from starfighter.utils import (
    Circle,
    Rect,
    circle_collision,
    clamp,
    distance,
    format_time,
    lerp,
    normalize,
    rand_int,
    rand_range,
    rect_collision,
    to_degrees,
    to_radians,
)


def test_rect_collision_is_strict_on_edges():
    a = Rect(0, 0, 10, 10)
    assert rect_collision(a, Rect(5, 5, 10, 10))
    # touching edges do not overlap
    assert not rect_collision(a, Rect(10, 0, 10, 10))
    assert not rect_collision(a, Rect(0, 10, 10, 10))


def test_circle_collision():
    assert circle_collision(Circle(0, 0, 5), Circle(8, 0, 4))
    assert not circle_collision(Circle(0, 0, 5), Circle(9, 0, 4))


def test_distance_and_normalize():
    assert distance(0, 0, 3, 4) == 5
    nx, ny, mag = normalize(3, 4)
    assert (nx, ny, mag) == pytest.approx((0.6, 0.8, 5.0))
    assert normalize(0, 0) == (0.0, 0.0, 0.0)


def test_clamp_and_lerp():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert lerp(0, 10, 0.25) == 2.5


def test_angles():
    assert to_radians(180) == pytest.approx(math.pi)
    assert to_degrees(math.pi / 2) == pytest.approx(90)


def test_random_helpers_stay_in_range():
    rng = random.Random(3)
    for _ in range(200):
        assert 2 <= rand_range(rng, 2, 5) < 5
        assert 1 <= rand_int(rng, 1, 3) <= 3


@pytest.mark.parametrize(
    "ms, text",
    [(0, "00:00"), (65_000, "01:05"), (3_600_000, "1:00:00"), (3_725_500, "1:02:05")],
)
def test_format_time(ms, text):
    assert format_time(ms) == text
