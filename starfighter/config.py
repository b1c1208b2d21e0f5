from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


@dataclass
class WindowConfig:
    width: int = 600
    height: int = 800
    title: str = "Starfighter"
    fps: int = 60


@dataclass
class GameplayConfig:
    # Every timer is frame-counted; one tick advances millisecond timers by frame_ms.
    frame_ms: int = 16
    seed: Optional[int] = None
    strict: bool = False
    auto_fire: bool = True
    difficulty: str = "normal"

    player_speed: float = 5.0
    player_shoot_interval: int = 15
    player_max_health: int = 3
    player_invulnerable_frames: int = 120
    player_max_shield: int = 3
    player_max_energy_shield: int = 5


@dataclass
class SpawnConfig:
    base_interval: int = 120
    min_interval: int = 60
    interval_step: int = 10
    max_alive: int = 8
    wave_quota_base: int = 5
    wave_quota_cap: int = 10
    boss_every: int = 5
    powerup_interval: int = 600
    drop_chance: float = 0.3


@dataclass
class RecordsConfig:
    path: str = "save/records.json"
    max_records: int = 100


@dataclass
class Settings:
    window: WindowConfig
    gameplay: GameplayConfig
    spawning: SpawnConfig
    records: RecordsConfig


def default_settings() -> Settings:
    return Settings(window=WindowConfig(), gameplay=GameplayConfig(), spawning=SpawnConfig(), records=RecordsConfig())


def _optional_int(v: Any) -> Optional[int]:
    if v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def load_settings(path: str | Path = "config/settings.yaml") -> Settings:
    p = Path(path)
    raw: Dict[str, Any] = {}
    if p.exists():
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    win = raw.get("window", {})
    window = WindowConfig(
        width=int(win.get("width", 600)),
        height=int(win.get("height", 800)),
        title=str(win.get("title", "Starfighter")),
        fps=int(win.get("fps", 60)),
    )

    gp = raw.get("gameplay", {})
    player = gp.get("player", {})
    gameplay = GameplayConfig(
        frame_ms=int(gp.get("frame_ms", 16)),
        seed=_optional_int(gp.get("seed")),
        strict=bool(gp.get("strict", False)),
        auto_fire=bool(gp.get("auto_fire", True)),
        difficulty=str(gp.get("difficulty", "normal")),
        player_speed=float(player.get("speed", 5.0)),
        player_shoot_interval=int(player.get("shoot_interval", 15)),
        player_max_health=int(player.get("max_health", 3)),
        player_invulnerable_frames=int(player.get("invulnerable_frames", 120)),
        player_max_shield=int(player.get("max_shield", 3)),
        player_max_energy_shield=int(player.get("max_energy_shield", 5)),
    )

    sp = raw.get("spawning", {})
    spawning = SpawnConfig(
        base_interval=int(sp.get("base_interval", 120)),
        min_interval=int(sp.get("min_interval", 60)),
        interval_step=int(sp.get("interval_step", 10)),
        max_alive=int(sp.get("max_alive", 8)),
        wave_quota_base=int(sp.get("wave_quota_base", 5)),
        wave_quota_cap=int(sp.get("wave_quota_cap", 10)),
        boss_every=int(sp.get("boss_every", 5)),
        powerup_interval=int(sp.get("powerup_interval", 600)),
        drop_chance=float(sp.get("drop_chance", 0.3)),
    )

    rc = raw.get("records", {})
    records = RecordsConfig(
        path=str(rc.get("path", "save/records.json")),
        max_records=int(rc.get("max_records", 100)),
    )

    return Settings(window=window, gameplay=gameplay, spawning=spawning, records=records)
