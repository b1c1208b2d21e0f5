from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .logger import get_logger
from .utils import format_time

logger = get_logger(__name__)

RECORD_VERSION = "1.0.0"


@dataclass
class RunSummary:
    score: int = 0
    kills: int = 0
    survival_time_ms: float = 0.0
    shots: int = 0
    hits: int = 0
    max_combo: int = 0
    difficulty: str = "normal"
    achievements: List[str] = field(default_factory=list)
    end_reason: str = "unknown"
    lives_remaining: int = 0
    level: int = 1
    high_score: int = 0


def kills_per_minute(kills: int, survival_ms: float) -> float:
    if survival_ms <= 0:
        return 0.0
    return round(kills / (survival_ms / 60000) * 10) / 10


def score_per_minute(score: int, survival_ms: float) -> int:
    if survival_ms <= 0:
        return 0
    return round(score / (survival_ms / 60000))


def accuracy(hits: int, shots: int) -> int:
    return round(hits / shots * 100) if shots > 0 else 0


@dataclass
class RunRecord:
    id: int
    timestamp: str
    score: int
    high_score: int
    level: int
    kills: int
    survival_time_ms: float
    shots: int
    hits: int
    accuracy: int
    max_combo: int
    difficulty: str
    achievements: List[str]
    end_reason: str
    lives_remaining: int
    survival_time_formatted: str
    kills_per_minute: float
    score_per_minute: int
    version: str = RECORD_VERSION

    @property
    def achievement_count(self) -> int:
        return len(self.achievements)

    @property
    def played_at(self) -> datetime:
        return datetime.fromisoformat(self.timestamp)

    @classmethod
    def from_summary(cls, summary: RunSummary, record_id: int, when: datetime) -> "RunRecord":
        return cls(
            id=record_id,
            timestamp=when.isoformat(),
            score=int(summary.score),
            high_score=int(summary.high_score),
            level=int(summary.level),
            kills=int(summary.kills),
            survival_time_ms=float(summary.survival_time_ms),
            shots=int(summary.shots),
            hits=int(summary.hits),
            accuracy=accuracy(summary.hits, summary.shots),
            max_combo=int(summary.max_combo),
            difficulty=summary.difficulty,
            achievements=list(summary.achievements),
            end_reason=summary.end_reason,
            lives_remaining=int(summary.lives_remaining),
            survival_time_formatted=format_time(summary.survival_time_ms),
            kills_per_minute=kills_per_minute(summary.kills, summary.survival_time_ms),
            score_per_minute=score_per_minute(summary.score, summary.survival_time_ms),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunRecord":
        known = {f.name for f in fields(cls)}
        clean = {k: v for k, v in data.items() if k in known}
        record = cls(**clean)
        record.achievements = list(record.achievements or [])
        return record


def _valid_record(raw: Any) -> bool:
    return (
        isinstance(raw, dict)
        and bool(raw.get("id"))
        and bool(raw.get("timestamp"))
        and isinstance(raw.get("score"), (int, float))
        and not isinstance(raw.get("score"), bool)
    )


@dataclass
class ImportResult:
    success: bool
    imported: int = 0
    total: int = 0
    message: str = ""


TIME_SLOTS = (
    ("morning", 6, 12),
    ("afternoon", 12, 18),
    ("evening", 18, 24),
    ("late night", 0, 6),
)


class RecordStore:
    """Run history kept in one JSON file, oldest first, capped at max_records."""

    def __init__(self, path: str | Path, max_records: int = 100, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.path = Path(path)
        self.max_records = max_records
        self.clock = clock or datetime.now
        self.records: List[RunRecord] = []
        self._loaded = False

    def load(self) -> List[RunRecord]:
        self.records = []
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
                raw = data.get("records", []) if isinstance(data, dict) else data
                self.records = [RunRecord.from_dict(r) for r in raw if _valid_record(r)]
            except (OSError, ValueError, TypeError) as exc:
                logger.warning("Could not read records from %s: %s", self.path, exc)
                self.records = []
        if len(self.records) > self.max_records:
            self.records = self.records[-self.max_records:]
            self.save()
        self._loaded = True
        return self.records

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"version": RECORD_VERSION, "records": [r.to_dict() for r in self.records]}
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def _next_id(self, when: datetime) -> int:
        candidate = int(when.timestamp() * 1000)
        taken = {r.id for r in self.records}
        while candidate in taken:
            candidate += 1
        return candidate

    def append(self, summary: RunSummary) -> RunRecord:
        self._ensure_loaded()
        when = self.clock()
        record = RunRecord.from_summary(summary, self._next_id(when), when)
        self.records.append(record)
        while len(self.records) > self.max_records:
            self.records.pop(0)
        self.save()
        logger.info("Saved run record %d (score %d)", record.id, record.score)
        return record

    def all_records(self) -> List[RunRecord]:
        self._ensure_loaded()
        return list(reversed(self.records))

    def recent(self, count: int = 10) -> List[RunRecord]:
        self._ensure_loaded()
        if count <= 0:
            return []
        return list(reversed(self.records[-count:]))

    def get(self, record_id: int) -> Optional[RunRecord]:
        self._ensure_loaded()
        for r in self.records:
            if r.id == record_id:
                return r
        return None

    def delete(self, record_id: int) -> bool:
        self._ensure_loaded()
        for i, r in enumerate(self.records):
            if r.id == record_id:
                del self.records[i]
                self.save()
                return True
        return False

    def clear(self) -> None:
        self.records = []
        self._loaded = True
        self.save()

    def high_score(self) -> int:
        self._ensure_loaded()
        return max((r.score for r in self.records), default=0)

    def statistics(self) -> Dict[str, Any]:
        self._ensure_loaded()
        recs = self.records
        if not recs:
            return {
                "total_games": 0,
                "total_play_time": 0,
                "total_score": 0,
                "total_kills": 0,
                "average_score": 0,
                "average_kills": 0,
                "average_survival_time": 0,
                "best_score": 0,
                "best_kills": 0,
                "longest_survival": 0,
                "average_accuracy": 0,
                "best_combo": 0,
                "total_achievements": 0,
                "difficulty_stats": {},
                "recent_trend": "stable",
                "games_per_day": 0,
                "favorite_time": "unknown",
                "improvement_rate": 0,
            }

        games = len(recs)
        play_time = sum(r.survival_time_ms for r in recs)
        total_score = sum(r.score for r in recs)
        total_kills = sum(r.kills for r in recs)
        shots = sum(r.shots for r in recs)
        hits = sum(r.hits for r in recs)

        per_difficulty: Dict[str, Dict[str, int]] = {}
        for r in recs:
            d = per_difficulty.setdefault(r.difficulty, {"games": 0, "total_score": 0, "average_score": 0, "best_score": 0})
            d["games"] += 1
            d["total_score"] += r.score
            d["average_score"] = round(d["total_score"] / d["games"])
            d["best_score"] = max(d["best_score"], r.score)

        unlocked = set()
        for r in recs:
            unlocked.update(r.achievements)

        avg_survival = round(play_time / games)
        longest = max(r.survival_time_ms for r in recs)
        return {
            "total_games": games,
            "total_play_time": play_time,
            "total_play_time_formatted": format_time(play_time),
            "total_score": total_score,
            "total_kills": total_kills,
            "average_score": round(total_score / games),
            "average_kills": round(total_kills / games),
            "average_survival_time": avg_survival,
            "average_survival_time_formatted": format_time(avg_survival),
            "best_score": max(r.score for r in recs),
            "best_kills": max(r.kills for r in recs),
            "longest_survival": longest,
            "longest_survival_formatted": format_time(longest),
            "average_accuracy": accuracy(hits, shots),
            "best_combo": max(r.max_combo for r in recs),
            "total_achievements": len(unlocked),
            "difficulty_stats": per_difficulty,
            "recent_trend": self._recent_trend(),
            "games_per_day": self._games_per_day(),
            "favorite_time": self._favorite_time(),
            "improvement_rate": self._improvement_rate(),
        }

    def _recent_trend(self) -> str:
        if len(self.records) < 10:
            return "stable"
        recent = sum(r.score for r in self.records[-5:]) / 5
        previous = sum(r.score for r in self.records[-10:-5]) / 5
        if recent > previous * 1.1:
            return "improving"
        if recent < previous * 0.9:
            return "declining"
        return "stable"

    def _improvement_rate(self) -> int:
        if len(self.records) < 5:
            return 0
        first = sum(r.score for r in self.records[:5]) / 5
        last = sum(r.score for r in self.records[-5:]) / 5
        if first == 0:
            return 0
        return round((last - first) / first * 100)

    def _games_per_day(self) -> float:
        days = {r.played_at.date() for r in self.records}
        if not days:
            return 0
        return round(len(self.records) / len(days) * 10) / 10

    def _favorite_time(self) -> str:
        counts = {name: 0 for name, _, _ in TIME_SLOTS}
        for r in self.records:
            hour = r.played_at.hour
            for name, start, end in TIME_SLOTS:
                if start <= hour < end:
                    counts[name] += 1
                    break
        return max(counts, key=lambda k: counts[k])

    def export_data(self) -> Dict[str, Any]:
        self._ensure_loaded()
        return {
            "version": RECORD_VERSION,
            "export_date": self.clock().isoformat(),
            "record_count": len(self.records),
            "records": [r.to_dict() for r in self.records],
            "statistics": self.statistics(),
        }

    def import_data(self, payload: Any) -> ImportResult:
        self._ensure_loaded()
        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
        except ValueError as exc:
            return ImportResult(False, total=len(self.records), message=f"Import failed: {exc}")
        raw = data.get("records") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            return ImportResult(False, total=len(self.records), message="Import failed: invalid record format")
        valid = []
        for item in raw:
            if not _valid_record(item):
                continue
            try:
                valid.append(RunRecord.from_dict(item))
            except TypeError:
                continue
        if not valid:
            return ImportResult(False, total=len(self.records), message="Import failed: no valid records found")

        existing = {r.id for r in self.records}
        fresh = []
        for r in valid:
            if r.id not in existing:
                existing.add(r.id)
                fresh.append(r)
        self.records.extend(fresh)
        self.records.sort(key=lambda r: r.id)
        if len(self.records) > self.max_records:
            self.records = self.records[-self.max_records:]
        self.save()
        logger.info("Imported %d records", len(fresh))
        return ImportResult(True, imported=len(fresh), total=len(self.records), message=f"Imported {len(fresh)} new records")

    def search(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        difficulty: Optional[str] = None,
        min_score: Optional[int] = None,
        max_score: Optional[int] = None,
        has_achievement: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> List[RunRecord]:
        self._ensure_loaded()
        out = list(self.records)
        if start_date is not None:
            start = datetime.combine(start_date, time.min)
            out = [r for r in out if r.played_at.replace(tzinfo=None) >= start]
        if end_date is not None:
            end = datetime.combine(end_date, time.max)
            out = [r for r in out if r.played_at.replace(tzinfo=None) <= end]
        if difficulty:
            out = [r for r in out if r.difficulty == difficulty]
        if min_score is not None:
            out = [r for r in out if r.score >= min_score]
        if max_score is not None:
            out = [r for r in out if r.score <= max_score]
        if has_achievement:
            out = [r for r in out if has_achievement in r.achievements]
        if sort_by:
            out.sort(key=lambda r: getattr(r, sort_by, 0), reverse=sort_order == "desc")
            return out
        out.reverse()
        return out
