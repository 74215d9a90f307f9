"""
Central data model definitions used across the project.

This module defines the canonical structure of teaching sessions, week
windows and evaluation ratings so that:
- all modules share the same field names
- the backend's column names are mapped in exactly one place
- the schedule grid and the CLI render the same objects
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, List, Dict

from schoolgrid.ratings import average_score, parse_rating


# Column names used by the backend "teaching_sessions" table
SESSION_DATE_KEY = "ngay_hoc"
SESSION_START_KEY = "thoi_gian_bat_dau"
SESSION_END_KEY = "thoi_gian_ket_thuc"
SESSION_TEACHER_KEY = "giao_vien"
SESSION_FACILITY_KEY = "co_so"

RATING_KEYS = ("nhan_xet_1", "nhan_xet_2", "nhan_xet_3", "nhan_xet_4", "nhan_xet_5", "nhan_xet_6")
REMARK_KEY = "nhan_xet_chung"


def format_time(value: Optional[str]) -> str:
    """
    Trim 'HH:MM:SS' to 'HH:MM' for display. Empty input gives ''.
    """
    if not value:
        return ""
    return str(value).strip()[:5]


@dataclass
class TeachingSession:
    """
    Represents one teaching session (one class meeting on one date).

    Start and end are wall-clock times on the same day. The remaining backend
    columns are kept in `extra` and carried through untouched.
    """

    id: Any
    date: str
    start: str
    end: str
    class_name: str = ""
    session_no: Any = ""
    teacher_id: Any = ""
    facility_id: Any = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TeachingSession":
        known = {
            "id",
            SESSION_DATE_KEY,
            SESSION_START_KEY,
            SESSION_END_KEY,
            "class_name",
            "session_id",
            SESSION_TEACHER_KEY,
            SESSION_FACILITY_KEY,
        }

        def text(key: str) -> str:
            v = record.get(key)
            return "" if v is None else str(v)

        # ids keep their backend type so Selected(5) still matches 5
        def raw(key: str) -> Any:
            v = record.get(key)
            return "" if v is None else v

        return cls(
            id=raw("id"),
            date=text(SESSION_DATE_KEY),
            start=text(SESSION_START_KEY),
            end=text(SESSION_END_KEY),
            class_name=text("class_name"),
            session_no=raw("session_id"),
            teacher_id=raw(SESSION_TEACHER_KEY),
            facility_id=raw(SESSION_FACILITY_KEY),
            extra={k: v for k, v in record.items() if k not in known},
        )

    def field_value(self, name: str) -> Any:
        """
        Filterable capability: look up a field by its backend column name
        or by its attribute name. Raises KeyError for unknown fields.
        """
        aliases = {
            SESSION_DATE_KEY: "date",
            SESSION_START_KEY: "start",
            SESSION_END_KEY: "end",
            SESSION_TEACHER_KEY: "teacher_id",
            SESSION_FACILITY_KEY: "facility_id",
            "session_id": "session_no",
        }
        attr = aliases.get(name, name)
        if attr in ("id", "date", "start", "end", "class_name", "session_no", "teacher_id", "facility_id"):
            return getattr(self, attr)
        if name in self.extra:
            return self.extra[name]
        raise KeyError(name)

    def label(self) -> str:
        bits = [f"{format_time(self.start)}-{format_time(self.end)}", self.class_name or "Class N/A"]
        if self.session_no != "":
            bits.append(f"Session {self.session_no}")
        return " | ".join(bits)


@dataclass(frozen=True)
class WeekWindow:
    """
    Anchor date plus the Monday..Sunday interval that contains it.
    """

    anchor: date
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass
class DayBucket:
    """
    The sessions of one calendar day inside a week grid.
    """

    day: date
    events: List[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.events


@dataclass
class WeekGrid:
    """
    Seven day buckets (always Monday..Sunday) plus the number of events that
    were skipped because their date could not be parsed.
    """

    window: WeekWindow
    days: List[DayBucket]
    skipped: int = 0

    def bucket_for(self, day: date) -> Optional[DayBucket]:
        for b in self.days:
            if b.day == day:
                return b
        return None

    @property
    def event_count(self) -> int:
        return sum(len(b.events) for b in self.days)


@dataclass
class EvaluationRatings:
    """
    The six optional rating slots of one evaluated session.

    None means "not rated", which is different from a rating of 0.
    """

    values: List[Optional[float]] = field(default_factory=lambda: [None] * len(RATING_KEYS))
    remark: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "EvaluationRatings":
        slots = [parse_rating(record.get(k)) for k in RATING_KEYS]
        remark = record.get(REMARK_KEY)
        return cls(values=slots, remark=remark if isinstance(remark, str) and remark.strip() else None)

    def slots(self) -> List[Optional[float]]:
        return list(self.values)

    def average(self) -> Optional[float]:
        return average_score(self.values)
