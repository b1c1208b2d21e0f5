from __future__ import annotations

import math
import random
from typing import NamedTuple


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float


class Circle(NamedTuple):
    x: float
    y: float
    radius: float


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def rect_collision(a: Rect, b: Rect) -> bool:
    return (
        a.x < b.x + b.width
        and a.x + a.width > b.x
        and a.y < b.y + b.height
        and a.y + a.height > b.y
    )


def circle_collision(a: Circle, b: Circle) -> bool:
    return distance(a.x, a.y, b.x, b.y) < a.radius + b.radius


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def lerp(start: float, end: float, factor: float) -> float:
    return start + (end - start) * factor


def rand_range(rng: random.Random, lo: float, hi: float) -> float:
    return rng.random() * (hi - lo) + lo


def rand_int(rng: random.Random, lo: int, hi: int) -> int:
    """Inclusive on both ends."""
    return rng.randint(lo, hi)


def to_radians(degrees: float) -> float:
    return degrees * math.pi / 180


def to_degrees(radians: float) -> float:
    return radians * 180 / math.pi


def normalize(x: float, y: float) -> tuple[float, float, float]:
    mag = math.hypot(x, y)
    if mag == 0:
        return 0.0, 0.0, 0.0
    return x / mag, y / mag, mag


def format_time(milliseconds: float) -> str:
    seconds = int(milliseconds // 1000)
    minutes = seconds // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours}:{minutes % 60:02d}:{seconds % 60:02d}"
    return f"{minutes:02d}:{seconds % 60:02d}"
