"""
Tests for CLI entry points.

These tests focus on:
- Basic CLI argument validation (week needs a teacher or facility)
- Exit codes and printed output of the commands
- Reading snapshots from a temporary data directory
  (to avoid touching real data during tests)
"""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from schoolgrid.cli import main
from schoolgrid.storage import save_records


def _session(id_: str, day: str, start: str, name: str, **extra) -> dict:
    rec = {
        "id": id_,
        "ngay_hoc": day,
        "thoi_gian_bat_dau": start,
        "thoi_gian_ket_thuc": "",
        "class_name": name,
        "giao_vien": "T1",
    }
    rec.update(extra)
    return rec


class TestCLI(unittest.TestCase):
    def _run(self, argv: list[str]) -> tuple[int, str]:
        buf = io.StringIO()
        # wide, plain output so table cells are never wrapped
        with mock.patch.dict(os.environ, {"COLUMNS": "300"}, clear=True):
            with redirect_stdout(buf):
                with self.assertRaises(SystemExit) as ctx:
                    main(argv)
        return ctx.exception.code, buf.getvalue()

    def _week(self, rows: list[dict], *args: str) -> tuple[int, str]:
        with tempfile.TemporaryDirectory() as d:
            save_records(rows, Path(d) / "teaching_sessions.json")
            return self._run(["--data-dir", d, "week", *args])

    def test_average(self) -> None:
        code, out = self._run(["average", "8", "-", "6", "-", "-", "-"])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "7.0")

    def test_average_all_blank(self) -> None:
        code, out = self._run(["average", "-", "-"])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "-")

    def test_average_rejects_bad_input(self) -> None:
        code, _ = self._run(["average", "11"])
        self.assertEqual(code, 1)
        code, _ = self._run(["average", "1", "2", "3", "4", "5", "6", "7"])
        self.assertEqual(code, 1)

    def test_week_requires_subject(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, _ = self._run(["--data-dir", d, "week"])
        self.assertNotEqual(code, 0)

    def test_week_bad_date(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = self._run(["--data-dir", d, "week", "--teacher", "T1", "--date", "10.01.2024"])
        self.assertEqual(code, 1)
        self.assertIn("Invalid date", out)

    def test_week_renders_sessions(self) -> None:
        rows = [
            _session("s1", "2024-01-08", "08:00:00", "Starters A", thoi_gian_ket_thuc="09:30:00"),
            _session("s2", "2024-01-10", "17:30:00", "Other Teacher", giao_vien="T2"),
        ]
        code, out = self._week(rows, "--teacher", "T1", "--date", "2024-01-10")
        self.assertEqual(code, 0)
        lines = out.splitlines()
        header = next(line for line in lines if "Mon 08/01" in line)
        row = next(line for line in lines if "Starters A" in line)
        # the session sits in the Monday column, left of Tuesday
        self.assertLess(row.index("Starters A"), header.index("Tue 09/01"))
        self.assertIn("08:00-09:30 | Starters A", row)
        self.assertIn("No sessions", row)
        self.assertNotIn("Other Teacher", out)
        self.assertNotIn("skipped", out)

    def test_week_reports_unparsable_dates(self) -> None:
        rows = [
            _session("s1", "2024-01-08", "08:00", "Starters A"),
            _session("s2", "garbage", "09:00", "Broken"),
            _session("s3", "garbage", "09:00", "Broken T2", giao_vien="T2"),
        ]
        code, out = self._week(rows, "--teacher", "T1", "--date", "2024-01-10")
        self.assertEqual(code, 0)
        self.assertIn("Starters A", out)
        self.assertNotIn("Broken", out)
        # only the selected teacher's rows are counted
        self.assertIn("1 session(s) skipped: unparsable date", out)

    def test_week_by_facility(self) -> None:
        rows = [
            _session("s1", "2024-01-09", "08:00", "Flyers F1", co_so="F1"),
            _session("s2", "2024-01-09", "10:00", "Movers F2", co_so="F2"),
        ]
        code, out = self._week(rows, "--facility", "F1", "--date", "2024-01-10")
        self.assertEqual(code, 0)
        self.assertIn("Flyers F1", out)
        self.assertNotIn("Movers F2", out)

    def test_week_offset(self) -> None:
        rows = [
            _session("s1", "2024-01-08", "08:00", "This Week"),
            _session("s2", "2024-01-15", "08:00", "Next Week"),
            _session("s3", "2024-01-01", "08:00", "Last Week"),
        ]
        code, out = self._week(rows, "--teacher", "T1", "--date", "2024-01-10", "--offset", "1")
        self.assertEqual(code, 0)
        self.assertIn("Mon 15/01", out)
        self.assertIn("Next Week", out)
        self.assertNotIn("This Week", out)

        code, out = self._week(rows, "--teacher", "T1", "--date", "2024-01-10", "--offset", "-1")
        self.assertEqual(code, 0)
        self.assertIn("Mon 01/01", out)
        self.assertIn("Last Week", out)
        self.assertNotIn("This Week", out)

    def test_week_sort(self) -> None:
        rows = [
            _session("s1", "2024-01-09", "14:00", "Late"),
            _session("s2", "2024-01-09", "9:00", "Early"),
        ]
        code, out = self._week(rows, "--teacher", "T1", "--date", "2024-01-10")
        self.assertEqual(code, 0)
        self.assertLess(out.index("Late"), out.index("Early"))

        code, out = self._week(rows, "--teacher", "T1", "--date", "2024-01-10", "--sort")
        self.assertEqual(code, 0)
        self.assertLess(out.index("Early"), out.index("Late"))

    def test_list_with_filters(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            save_records(
                [{"id": "E1", "co_so": "F1"}, {"id": "E2", "co_so": "F2"}],
                Path(d) / "employees.json",
            )
            code, out = self._run(["--data-dir", d, "list", "employees", "--where", "co_so=F1"])
            self.assertEqual(code, 0)
            self.assertIn("E1", out)
            self.assertNotIn("E2", out)
            self.assertIn("employees (1/2)", out)

            code, out = self._run(["--data-dir", d, "list", "employees", "--where", "co_so=all"])
            self.assertEqual(code, 0)
            self.assertIn("E1", out)
            self.assertIn("E2", out)

            code, out = self._run(["--data-dir", d, "list", "employees", "--where", "co_so=F9"])
            self.assertEqual(code, 0)
            self.assertIn("No results.", out)

            code, out = self._run(["--data-dir", d, "list", "employees", "--where", "co_so"])
            self.assertEqual(code, 1)
            self.assertIn("Invalid filter", out)

    def test_list_columns(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            save_records([{"id": "E1", "ho_ten": "Lan", "co_so": "F1"}], Path(d) / "employees.json")
            code, out = self._run(["--data-dir", d, "list", "employees", "--columns", "ho_ten"])
        self.assertEqual(code, 0)
        self.assertIn("Lan", out)
        self.assertNotIn("co_so", out)

    def test_sync_without_backend_config(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with mock.patch.dict("os.environ", {"SCHOOLGRID_SUPABASE_URL": "", "SCHOOLGRID_SUPABASE_KEY": ""}):
                code, out = self._run(["--data-dir", d, "sync", "classes"])
        self.assertEqual(code, 1)
        self.assertIn("not configured", out)


if __name__ == "__main__":
    unittest.main()
