from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import load_settings
from .content import Content
from .records import RecordStore, RunSummary


app = FastAPI(title="Starfighter Records")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # adjust for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RunSummaryRequest(BaseModel):
    score: int = Field(0, ge=0)
    kills: int = Field(0, ge=0)
    survival_time_ms: float = Field(0.0, ge=0)
    shots: int = Field(0, ge=0)
    hits: int = Field(0, ge=0)
    max_combo: int = Field(0, ge=0)
    difficulty: str = "normal"
    achievements: List[str] = Field(default_factory=list)
    end_reason: str = "unknown"
    lives_remaining: int = 0
    level: int = 1
    high_score: int = 0


class ImportRequest(BaseModel):
    records: List[Dict[str, Any]]
    version: Optional[str] = None


def _store() -> RecordStore:
    settings = load_settings()
    return RecordStore(settings.records.path, settings.records.max_records)


@app.get("/api/settings")
def get_settings() -> Dict[str, Any]:
    s = load_settings()
    return {
        "window": asdict(s.window),
        "gameplay": asdict(s.gameplay),
        "spawning": asdict(s.spawning),
        "records": asdict(s.records),
    }


@app.get("/api/content/{kind}")
def get_content(kind: str) -> Dict[str, Any]:
    c = Content()
    if kind == "enemies":
        return c.enemy_table()
    if kind == "powerups":
        return c.powerup_table()
    if kind == "difficulties":
        return c.difficulties
    if kind == "achievements":
        return c.achievements
    raise HTTPException(404, f"Unknown content kind: {kind}")


@app.get("/api/records")
def list_records(
    limit: Optional[int] = None,
    difficulty: Optional[str] = None,
    min_score: Optional[int] = None,
    max_score: Optional[int] = None,
    achievement: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sort_by: Optional[str] = None,
    sort_order: str = "asc",
) -> List[Dict[str, Any]]:
    records = _store().search(
        start_date=start_date,
        end_date=end_date,
        difficulty=difficulty,
        min_score=min_score,
        max_score=max_score,
        has_achievement=achievement,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    if limit is not None:
        records = records[:max(0, limit)]
    return [r.to_dict() for r in records]


@app.post("/api/records", status_code=201)
def add_record(req: RunSummaryRequest) -> Dict[str, Any]:
    record = _store().append(RunSummary(**req.model_dump()))
    return record.to_dict()


@app.delete("/api/records")
def clear_records() -> Dict[str, Any]:
    _store().clear()
    return {"status": "ok"}


@app.get("/api/records/{record_id}")
def get_record(record_id: int) -> Dict[str, Any]:
    record = _store().get(record_id)
    if record is None:
        raise HTTPException(404, f"Unknown record: {record_id}")
    return record.to_dict()


@app.delete("/api/records/{record_id}")
def delete_record(record_id: int) -> Dict[str, Any]:
    if not _store().delete(record_id):
        raise HTTPException(404, f"Unknown record: {record_id}")
    return {"status": "ok"}


@app.get("/api/statistics")
def get_statistics() -> Dict[str, Any]:
    return _store().statistics()


@app.get("/api/export")
def export_records() -> Dict[str, Any]:
    return _store().export_data()


@app.post("/api/import")
def import_records(req: ImportRequest) -> Dict[str, Any]:
    result = _store().import_data(req.model_dump())
    if not result.success:
        raise HTTPException(400, result.message)
    return asdict(result)
