"""
Local record store.

Every backend table is kept as one JSON snapshot file:

    data/<table>.json   ->   [ {...}, {...}, ... ]

Design rationale:
- list pages and the schedule view read a full snapshot and filter in memory
- the snapshots are refreshed by `schoolgrid sync` (see fetch.py)

Loading never crashes the application: a missing or broken snapshot is an
empty table.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from schoolgrid.filters import Selected, compose_filters

logger = logging.getLogger(__name__)


def load_records(path: str | Path) -> list[dict[str, Any]]:
    """
    Load a list of flat records from a JSON file.

    Returns an empty list if the file does not exist, is invalid JSON or
    does not hold a list. Items that are not JSON objects are dropped.
    """
    p = Path(path)

    # Table never synced yet → no records
    if not p.exists():
        return []

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Could not read snapshot %s: %s", p, e)
        return []

    if not isinstance(data, list):
        logger.warning("Snapshot %s does not hold a list", p)
        return []
    return [r for r in data if isinstance(r, dict)]


def save_records(records: Iterable[dict[str, Any]], path: str | Path) -> None:
    """
    Save records to a JSON file. Creates parent directories if needed.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(list(records), indent=2, ensure_ascii=False), encoding="utf-8")


class RecordStore:
    """
    getAll / getByX access to the snapshots in one directory.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, table: str) -> Path:
        name = table.strip()
        if not name or "/" in name or "\\" in name or name.startswith("."):
            raise ValueError(f"Invalid table name: {table!r}")
        return self.data_dir / f"{name}.json"

    def get_all(self, table: str) -> list[dict[str, Any]]:
        return load_records(self.path_for(table))

    def get_by(self, table: str, field: str, value: Any) -> list[dict[str, Any]]:
        return compose_filters(self.get_all(table), {field: Selected(value)})

    def get_by_id(self, table: str, record_id: Any) -> Optional[dict[str, Any]]:
        for r in self.get_all(table):
            if str(r.get("id", "")) == str(record_id):
                return r
        return None

    def save(self, table: str, records: Iterable[dict[str, Any]]) -> None:
        save_records(records, self.path_for(table))
