"""
Page state for list and schedule views.

State objects are immutable. Every user action is a method returning a new
state object; the transforms in filters.py and schedule.py are then re-run on
the new state. Nothing here talks to the backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from schoolgrid import schedule
from schoolgrid.filters import NO_FILTER, CriterionValue, compose_filters, criterion, has_active_filters, reset_criteria
from schoolgrid.model import SESSION_FACILITY_KEY, SESSION_TEACHER_KEY, WeekGrid, WeekWindow

SCHEDULE_MODES = ("teacher", "facility")


@dataclass(frozen=True)
class FilterState:
    """
    Current drop-down selections of one list page.
    """

    criteria: Mapping[str, CriterionValue] = field(default_factory=dict)

    @classmethod
    def for_fields(cls, *names: str) -> "FilterState":
        # What a filter panel looks like when it mounts: every field unrestricted
        return cls(criteria={n: NO_FILTER for n in names})

    def select(self, name: str, raw: Any) -> "FilterState":
        new = dict(self.criteria)
        new[name] = criterion(raw)
        return replace(self, criteria=new)

    def reset(self) -> "FilterState":
        return replace(self, criteria=reset_criteria(self.criteria))

    @property
    def is_active(self) -> bool:
        return has_active_filters(self.criteria)

    def apply(self, records: Iterable[Any]) -> list[Any]:
        return compose_filters(records, self.criteria)


@dataclass(frozen=True)
class ScheduleState:
    """
    Teacher/facility schedule page: which week, which teacher or facility.

    fetch_token changes whenever the sessions for the page must be fetched
    again. A fetch result carrying an older token is stale and must be
    dropped by the caller.
    """

    anchor: date
    mode: str = "teacher"
    teacher_id: Optional[str] = None
    facility_id: Optional[str] = None
    fetch_token: int = 0

    def __post_init__(self) -> None:
        if self.mode not in SCHEDULE_MODES:
            raise ValueError(f"Unknown schedule mode: {self.mode!r}")

    @classmethod
    def initial(cls, today: Optional[date] = None) -> "ScheduleState":
        return cls(anchor=schedule.current_week(today))

    def _refetch(self, **changes: Any) -> "ScheduleState":
        return replace(self, fetch_token=self.fetch_token + 1, **changes)

    @property
    def window(self) -> WeekWindow:
        return schedule.week_window(self.anchor)

    def previous_week(self) -> "ScheduleState":
        return self._refetch(anchor=schedule.previous_week(self.anchor))

    def next_week(self) -> "ScheduleState":
        return self._refetch(anchor=schedule.next_week(self.anchor))

    def current_week(self, today: Optional[date] = None) -> "ScheduleState":
        return self._refetch(anchor=schedule.current_week(today))

    def pick_date(self, day: date) -> "ScheduleState":
        return self._refetch(anchor=day)

    def select_teacher(self, teacher_id: Optional[str]) -> "ScheduleState":
        return self._refetch(teacher_id=teacher_id or None)

    def select_facility(self, facility_id: Optional[str]) -> "ScheduleState":
        return self._refetch(facility_id=facility_id or None)

    def switch_mode(self, mode: str) -> "ScheduleState":
        if mode not in SCHEDULE_MODES:
            raise ValueError(f"Unknown schedule mode: {mode!r}")
        return self._refetch(mode=mode)

    @property
    def subject_id(self) -> Optional[str]:
        return self.teacher_id if self.mode == "teacher" else self.facility_id

    @property
    def has_subject(self) -> bool:
        return self.subject_id is not None

    def subject_criteria(self) -> dict[str, CriterionValue]:
        """
        Filter criteria selecting the sessions of the chosen teacher/facility.
        """
        key = SESSION_TEACHER_KEY if self.mode == "teacher" else SESSION_FACILITY_KEY
        return {key: criterion(self.subject_id)}

    def is_current(self, token: int) -> bool:
        return token == self.fetch_token

    def subject_sessions(self, sessions: Iterable[Any]) -> list[Any]:
        """
        Sessions of the selected teacher/facility, any week.

        Empty when nothing is selected for the active mode.
        """
        if not self.has_subject:
            return []
        return compose_filters(sessions, self.subject_criteria())

    def week_grid(self, sessions: Iterable[Any], *, sort_by_start: bool = False) -> WeekGrid:
        """
        The 7-day grid of the selected teacher/facility for the current week.

        Sessions with an unparsable date end up in WeekGrid.skipped.
        """
        return schedule.build_week_grid(self.subject_sessions(sessions), self.anchor, sort_by_start=sort_by_start)
