"""
Unit tests for immutable page state.
"""

import unittest
from datetime import date

from schoolgrid.filters import NO_FILTER, Selected
from schoolgrid.state import FilterState, ScheduleState


SESSIONS = [
    {"id": "1", "ngay_hoc": "2024-01-08", "giao_vien": "T1", "co_so": "F1"},
    {"id": "2", "ngay_hoc": "2024-01-09", "giao_vien": "T2", "co_so": "F1"},
    {"id": "3", "ngay_hoc": "2024-01-16", "giao_vien": "T1", "co_so": "F2"},
    {"id": "4", "ngay_hoc": "2024-01-14", "giao_vien": "T1", "co_so": "F2"},
]


class TestFilterState(unittest.TestCase):
    def test_mount_select_reset(self) -> None:
        s0 = FilterState.for_fields("co_so", "tinh_trang")
        self.assertFalse(s0.is_active)

        s1 = s0.select("co_so", "F1")
        self.assertTrue(s1.is_active)
        self.assertEqual(s1.criteria["co_so"], Selected("F1"))
        # old state untouched
        self.assertIs(s0.criteria["co_so"], NO_FILTER)

        s2 = s1.reset()
        self.assertFalse(s2.is_active)
        self.assertEqual(set(s2.criteria), {"co_so", "tinh_trang"})

    def test_apply(self) -> None:
        s = FilterState().select("co_so", "F2").select("giao_vien", "all")
        self.assertEqual([r["id"] for r in s.apply(SESSIONS)], ["3", "4"])


class TestScheduleState(unittest.TestCase):
    def test_navigation_bumps_fetch_token(self) -> None:
        s0 = ScheduleState.initial(date(2024, 1, 10))
        s1 = s0.next_week()
        s2 = s1.previous_week()
        self.assertEqual(s1.anchor, date(2024, 1, 17))
        self.assertEqual(s2.anchor, s0.anchor)
        self.assertEqual(s2.fetch_token, 2)
        self.assertFalse(s2.is_current(s1.fetch_token))
        self.assertTrue(s2.is_current(2))

    def test_current_week_and_pick_date(self) -> None:
        s = ScheduleState.initial(date(2024, 1, 10)).pick_date(date(2024, 3, 1))
        self.assertEqual(s.window.start, date(2024, 2, 26))
        self.assertEqual(s.current_week(date(2024, 1, 10)).anchor, date(2024, 1, 10))

    def test_no_subject_gives_no_sessions(self) -> None:
        s = ScheduleState.initial(date(2024, 1, 10))
        self.assertFalse(s.has_subject)
        self.assertEqual(s.subject_sessions(SESSIONS), [])
        self.assertEqual(s.week_grid(SESSIONS).event_count, 0)

    def test_teacher_week(self) -> None:
        s = ScheduleState.initial(date(2024, 1, 10)).select_teacher("T1")
        self.assertEqual([r["id"] for r in s.subject_sessions(SESSIONS)], ["1", "3", "4"])
        grid = s.week_grid(SESSIONS)
        self.assertEqual([r["id"] for b in grid.days for r in b.events], ["1", "4"])

    def test_week_grid_counts_unparsable_dates(self) -> None:
        rows = SESSIONS + [{"id": "5", "ngay_hoc": "garbage", "giao_vien": "T1"}]
        s = ScheduleState.initial(date(2024, 1, 10)).select_teacher("T1")
        with self.assertLogs("schoolgrid.schedule", level="WARNING"):
            grid = s.week_grid(rows)
        self.assertEqual(grid.skipped, 1)
        self.assertEqual(grid.event_count, 2)

    def test_facility_mode(self) -> None:
        s = ScheduleState.initial(date(2024, 1, 10)).select_teacher("T1").switch_mode("facility")
        self.assertFalse(s.has_subject)
        s = s.select_facility("F1")
        grid = s.week_grid(SESSIONS)
        self.assertEqual([r["id"] for b in grid.days for r in b.events], ["1", "2"])

    def test_unknown_mode(self) -> None:
        with self.assertRaises(ValueError):
            ScheduleState.initial(date(2024, 1, 10)).switch_mode("room")
        with self.assertRaises(ValueError):
            ScheduleState(anchor=date(2024, 1, 10), mode="room")


if __name__ == "__main__":
    unittest.main()
