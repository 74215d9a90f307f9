from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from schoolgrid.config import Settings, configure_logging, load_settings
from schoolgrid.model import SESSION_DATE_KEY, SESSION_FACILITY_KEY, SESSION_TEACHER_KEY, WeekWindow
from schoolgrid.storage import RecordStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

SESSIONS_TABLE = "teaching_sessions"

DEFAULT_TABLES = [
    "employees",
    "facilities",
    "classes",
    "students",
    "enrollments",
    SESSIONS_TABLE,
]


class FetchError(RuntimeError):
    """Raised when the backend cannot be reached or returns bad data."""


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def _headers(settings: Settings) -> Dict[str, str]:
    if not settings.supabase_url or not settings.supabase_key:
        raise FetchError("Backend not configured: set SCHOOLGRID_SUPABASE_URL and SCHOOLGRID_SUPABASE_KEY")
    return {
        "apikey": settings.supabase_key,
        "Authorization": f"Bearer {settings.supabase_key}",
        "Accept": "application/json",
    }


def fetch_table(
    table: str,
    settings: Settings,
    params: Optional[Dict[str, str]] = None,
    session: Optional[requests.Session] = None,
) -> List[Dict[str, Any]]:
    """
    Load all rows of one table from the REST endpoint.

    `params` are extra PostgREST query filters, e.g. {"co_so": "eq.F1"}.
    """
    headers = _headers(settings)
    url = f"{settings.supabase_url}/rest/v1/{table}"
    query = {"select": "*"}
    if params:
        query.update(params)

    http = session or requests
    logger.info("Fetching %s", table)
    try:
        resp = http.get(url, params=query, headers=headers, timeout=settings.timeout)
        resp.raise_for_status()
        data = resp.json()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {table}: {e}") from e
    except ValueError as e:
        raise FetchError(f"Invalid JSON for {table}: {e}") from e

    if not isinstance(data, list):
        raise FetchError(f"Unexpected payload for {table}: expected a list")

    logger.info("Fetched %d row(s) from %s", len(data), table)
    return data


def fetch_sessions_for_week(
    settings: Settings,
    window: WeekWindow,
    teacher_id: Optional[str] = None,
    facility_id: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> List[Dict[str, Any]]:
    """
    Sessions inside one week, optionally for one teacher and/or facility.

    The week bounds are sent as a date range on the session date column so
    only that week travels over the wire.
    """
    params: Dict[str, Any] = {
        SESSION_DATE_KEY: [f"gte.{window.start.isoformat()}", f"lte.{window.end.isoformat()}"],
    }
    if teacher_id:
        params[SESSION_TEACHER_KEY] = f"eq.{teacher_id}"
    if facility_id:
        params[SESSION_FACILITY_KEY] = f"eq.{facility_id}"
    return fetch_table(SESSIONS_TABLE, settings, params=params, session=session)


def sync_tables(
    tables: Iterable[str],
    settings: Settings,
    store: RecordStore,
    session: Optional[requests.Session] = None,
) -> Dict[str, int]:
    """
    Fetch each table and overwrite its local snapshot. Returns row counts.
    """
    if session is None:
        with requests.Session() as http:
            return sync_tables(tables, settings, store, session=http)

    counts: Dict[str, int] = {}
    for table in tables:
        rows = fetch_table(table, settings, session=session)
        store.save(table, rows)
        counts[table] = len(rows)
    logger.info("Synced %d table(s)", len(counts))
    return counts


# ---------------------------------------------------------------------------
# CLI entry
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="schoolgrid.fetch", description="Download backend tables as JSON snapshots")
    p.add_argument("tables", nargs="*", help=f"Tables to sync (default: {' '.join(DEFAULT_TABLES)})")
    p.add_argument("--data-dir", type=str, default=None, help="Snapshot directory")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging("INFO")

    try:
        settings = load_settings()
        store = RecordStore(args.data_dir or settings.data_dir)
        counts = sync_tables(args.tables or DEFAULT_TABLES, settings, store)
    except (ValueError, FetchError) as e:
        logger.debug("Sync failed", exc_info=True)
        print(f"Error: {e}")
        raise SystemExit(1)

    for table, n in counts.items():
        print(f"{table}: {n}")


if __name__ == "__main__":
    main()
