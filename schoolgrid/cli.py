"""
CLI (Command Line Interface).

Quick terminal commands on top of the local snapshots, e.g.:

    schoolgrid week --teacher T01 --date 2024-01-10
    schoolgrid week --facility F1 --offset -1 --sort
    schoolgrid list employees --where co_so=F1 --where tinh_trang=active
    schoolgrid average 8 - 6
    schoolgrid sync

Note:
- Snapshots are JSON files in the data directory (see storage.py)
- `sync` is the only command that talks to the backend
"""

from __future__ import annotations

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from rich.console import Console

from schoolgrid.config import Settings, configure_logging, load_settings
from schoolgrid.fetch import DEFAULT_TABLES, SESSIONS_TABLE, FetchError, sync_tables
from schoolgrid.ratings import MAX_RATING_SLOTS, average_score, format_average, parse_rating
from schoolgrid.state import FilterState, ScheduleState
from schoolgrid.storage import RecordStore
from schoolgrid.view import render_records, render_week

logger = logging.getLogger(__name__)

ABSENT_MARKERS = ("-", "_")


def _parse_date(text: str) -> date:
    try:
        return datetime.strptime(text.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {text!r}") from None


def _parse_where(items: list[str]) -> FilterState:
    """
    Turn ['co_so=F1', 'tinh_trang=all'] into a FilterState.
    """
    state = FilterState()
    for item in items:
        name, sep, value = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Invalid filter (expected field=value): {item!r}")
        state = state.select(name, value.strip())
    return state


def _store(args: argparse.Namespace, settings: Settings) -> RecordStore:
    data_dir = Path(args.data_dir) if args.data_dir else settings.data_dir
    return RecordStore(data_dir)


def _cmd_week(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    """
    Show the 7-day schedule of one teacher or facility.
    """
    today = date.today()
    state = ScheduleState.initial(today)
    if args.date:
        state = state.pick_date(_parse_date(args.date))

    if args.facility:
        state = state.switch_mode("facility").select_facility(args.facility.strip())
    elif args.teacher:
        state = state.select_teacher(args.teacher.strip())

    if not state.has_subject:
        print("Please provide --teacher or --facility.")
        return 1

    for _ in range(abs(args.offset)):
        state = state.next_week() if args.offset > 0 else state.previous_week()

    sessions = _store(args, settings).get_all(args.table)
    grid = state.week_grid(sessions, sort_by_start=args.sort)

    render_week(grid, console, today=today)
    return 0


def _cmd_list(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    """
    Print the records of one table that match all --where filters.
    """
    filters = _parse_where(args.where or [])
    records = _store(args, settings).get_all(args.table)
    if not records:
        print(f"No records in {args.table}.")
        return 0

    rows = filters.apply(records)
    if not rows:
        print("No results.")
        return 0

    if args.columns:
        columns = [c.strip() for c in args.columns.split(",") if c.strip()]
    else:
        columns = list(rows[0].keys())[:6]

    render_records(rows, columns, console, title=f"{args.table} ({len(rows)}/{len(records)})")
    return 0


def _cmd_average(args: argparse.Namespace) -> int:
    """
    Average of the given ratings. '-' marks a slot that was left blank.
    """
    raw: list[Any] = [None if r.strip() in ABSENT_MARKERS else r for r in args.ratings]
    if len(raw) > MAX_RATING_SLOTS:
        print(f"At most {MAX_RATING_SLOTS} ratings.")
        return 1

    ratings = [parse_rating(r) for r in raw]
    print(format_average(average_score(ratings)))
    return 0


def _cmd_sync(args: argparse.Namespace, settings: Settings) -> int:
    tables = args.tables or DEFAULT_TABLES
    counts = sync_tables(tables, settings, _store(args, settings))
    for table, n in counts.items():
        print(f"{table}: {n} records")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="schoolgrid", description="SchoolGrid CLI")
    parser.add_argument("--data-dir", type=str, default=None, help="Snapshot directory")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (e.g. INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_week = sub.add_parser("week", help="Weekly schedule of a teacher or facility")
    p_week.add_argument("--teacher", type=str, default=None, help="Teacher (employee) id")
    p_week.add_argument("--facility", type=str, default=None, help="Facility id")
    p_week.add_argument("--date", type=str, default=None, help="Any date in the week (YYYY-MM-DD, default today)")
    p_week.add_argument("--offset", type=int, default=0, help="Move N weeks forward (negative = back)")
    p_week.add_argument("--sort", action="store_true", help="Sort each day by start time")
    p_week.add_argument("--table", type=str, default=SESSIONS_TABLE, help="Sessions table name")

    p_list = sub.add_parser("list", help="List records of a table with filters")
    p_list.add_argument("table", type=str, help="Table name (e.g. employees)")
    p_list.add_argument("--where", action="append", help="Filter field=value ('all' = no filter)")
    p_list.add_argument("--columns", type=str, default=None, help="Comma separated columns to show")

    p_avg = sub.add_parser("average", help="Average of up to six ratings")
    p_avg.add_argument("ratings", nargs="*", help="Ratings 0-10, '-' for a blank slot")

    p_sync = sub.add_parser("sync", help="Download tables from the backend")
    p_sync.add_argument("tables", nargs="*", help="Tables to sync (default: all)")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
        configure_logging(args.log_level or settings.log_level)
        console = Console()

        if args.command == "week":
            raise SystemExit(_cmd_week(args, settings, console))
        if args.command == "list":
            raise SystemExit(_cmd_list(args, settings, console))
        if args.command == "average":
            raise SystemExit(_cmd_average(args))
        if args.command == "sync":
            raise SystemExit(_cmd_sync(args, settings))
    except (ValueError, FetchError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        raise SystemExit(1)

    raise SystemExit(2)
