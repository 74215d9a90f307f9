from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from schoolgrid.model import TeachingSession, WeekGrid, format_time
from schoolgrid.schedule import event_end, event_field, event_start, weekday_short

EMPTY_DAY_TEXT = "No sessions"


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


def session_line(ev: Any) -> str:
    if isinstance(ev, TeachingSession):
        return ev.label()
    name = _safe_str(event_field(ev, "class_name")).strip() or "Class N/A"
    bits = [f"{format_time(event_start(ev))}-{format_time(event_end(ev))}", name]
    session_no = _safe_str(event_field(ev, "session_no", "session_id")).strip()
    if session_no:
        bits.append(f"Session {session_no}")
    return " | ".join(bits)


def day_header(d: date, today: Optional[date] = None) -> str:
    text = f"{weekday_short(d)} {d.strftime('%d/%m')}"
    if today is not None and d == today:
        return f"[bold reverse]{text}[/]"
    return text


def render_week(grid: WeekGrid, console: Console, today: Optional[date] = None) -> None:
    """
    Print a week grid as a table: one column per weekday, one session per
    cell. Empty days show EMPTY_DAY_TEXT.
    """
    title = f"Week {grid.window.start.isoformat()} .. {grid.window.end.isoformat()}"
    table = Table(title=title, box=box.SIMPLE)
    for bucket in grid.days:
        table.add_column(day_header(bucket.day, today))

    max_len = max(1, max(len(b.events) for b in grid.days))
    for r in range(max_len):
        row = []
        for bucket in grid.days:
            if bucket.is_empty:
                row.append(f"[dim]{EMPTY_DAY_TEXT}[/]" if r == 0 else "")
            else:
                row.append(session_line(bucket.events[r]) if r < len(bucket.events) else "")
        table.add_row(*row)
    console.print(table)

    if grid.skipped:
        console.print(f"[yellow]{grid.skipped} session(s) skipped: unparsable date[/]")


def render_records(records: Sequence[dict[str, Any]], columns: Sequence[str], console: Console, title: str = "") -> None:
    table = Table(title=title or None, box=box.SIMPLE)
    table.add_column("#", justify="right")
    for c in columns:
        table.add_column(c)
    for i, r in enumerate(records, start=1):
        table.add_row(str(i), *[_safe_str(r.get(c)) for c in columns])
    console.print(table)
