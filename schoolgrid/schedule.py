"""
Weekly schedule grid.

Given teaching sessions and an anchor date, build the Monday..Sunday week
that contains the anchor and put every session into the bucket of its day.

Rules:
- the week always starts on Monday (anchor on a Monday -> that Monday)
- dates are compared as calendar days, never as date-times
- a day without sessions is still part of the grid (empty bucket)
- sessions with an unparsable date are skipped and counted, not raised
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping, Optional

from schoolgrid.model import (
    SESSION_DATE_KEY,
    SESSION_END_KEY,
    SESSION_START_KEY,
    DayBucket,
    WeekGrid,
    WeekWindow,
)

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def week_start(anchor: date) -> date:
    """
    Most recent Monday on or before `anchor`.
    """
    return anchor - timedelta(days=anchor.weekday())


def week_window(anchor: date) -> WeekWindow:
    start = week_start(anchor)
    return WeekWindow(anchor=anchor, start=start, end=start + timedelta(days=DAYS_PER_WEEK - 1))


def week_days(anchor: date) -> list[date]:
    """
    The 7 contiguous dates of the week containing `anchor`, Monday first.
    """
    start = week_start(anchor)
    return [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def weekday_short(d: date) -> str:
    return WEEKDAY_NAMES[d.weekday()]


def previous_week(anchor: date) -> date:
    return anchor - timedelta(days=DAYS_PER_WEEK)


def next_week(anchor: date) -> date:
    return anchor + timedelta(days=DAYS_PER_WEEK)


def current_week(today: Optional[date] = None) -> date:
    return today if today is not None else date.today()


def parse_event_date(value: Any) -> Optional[date]:
    """
    Calendar day of an event date value, or None if it cannot be parsed.

    Accepts date/datetime objects and ISO strings. A time part
    ('2024-01-08T23:30:00', '2024-01-08 08:00') is cut off first so the
    time of day can never move an event to another day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    s = value.strip()
    if "T" in s:
        s = s.split("T", 1)[0]
    elif " " in s:
        s = s.split(" ", 1)[0]
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return None


def event_field(ev: Any, attr: str, column: Optional[str] = None) -> Any:
    """
    Read one field of an event: backend rows by column name (then attribute
    name), Filterable objects through field_value(), anything else by
    attribute. Missing fields give None.
    """
    names = [n for n in (column, attr) if n]
    if isinstance(ev, Mapping):
        for n in names:
            if n in ev:
                return ev[n]
        return None
    getter = getattr(ev, "field_value", None)
    if callable(getter):
        for n in names:
            try:
                return getter(n)
            except KeyError:
                continue
    return getattr(ev, attr, None)


def event_date(ev: Any) -> Optional[date]:
    return parse_event_date(event_field(ev, "date", SESSION_DATE_KEY))


def event_start(ev: Any) -> str:
    v = event_field(ev, "start", SESSION_START_KEY)
    return "" if v is None else str(v).strip()


def event_end(ev: Any) -> str:
    v = event_field(ev, "end", SESSION_END_KEY)
    return "" if v is None else str(v).strip()


def start_sort_key(ev: Any) -> tuple[int, int, int]:
    """
    Sort key for start times such as '9:00', '09:00' or '17:30:00'.

    Events without a readable start time sort after all others.
    """
    parts = event_start(ev).split(":")
    try:
        return (0, int(parts[0]), int(parts[1]))
    except (IndexError, ValueError):
        return (1, 0, 0)


def events_in_week(events: Iterable[Any], anchor: date) -> tuple[list[Any], int]:
    """
    Keep the events whose date lies in the anchor's week (inclusive bounds).

    Returns (events, skipped) where skipped counts events with an unparsable
    date. Input order is preserved.
    """
    window = week_window(anchor)
    kept: list[Any] = []
    skipped = 0
    for ev in events:
        d = event_date(ev)
        if d is None:
            skipped += 1
            continue
        if window.contains(d):
            kept.append(ev)
    return kept, skipped


def build_week_grid(events: Iterable[Any], anchor: date, *, sort_by_start: bool = False) -> WeekGrid:
    """
    Bucket events into the 7 days of the anchor's week.

    Within a day the input order is kept. With sort_by_start=True each day is
    stably sorted by its start time (hour, minute).
    """
    window = week_window(anchor)
    kept, skipped = events_in_week(events, anchor)

    buckets = [DayBucket(day=d) for d in week_days(anchor)]
    for ev in kept:
        d = event_date(ev)
        # d is not None here, events_in_week() already dropped unparsable dates
        buckets[(d - window.start).days].events.append(ev)

    if sort_by_start:
        for b in buckets:
            b.events.sort(key=start_sort_key)

    if skipped:
        logger.warning("Skipped %d event(s) with an unparsable date", skipped)

    return WeekGrid(window=window, days=buckets, skipped=skipped)
