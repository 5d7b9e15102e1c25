from __future__ import annotations

import calendar
import copy
import datetime as dt
import unittest

from rotina.calendar_grid import InvalidReferenceDate, MonthCursor, build_month_grid, parse_event_start
from rotina.model import TimedEvent, WeekStart
from rotina.util.tz import fixed_clock

NOW = fixed_clock(dt.datetime(2024, 3, 15, 10, 0))


def _ev(i: int, start, title: str = "") -> TimedEvent:
    return TimedEvent(id=i, title=title or f"e{i}", start=start, end=None)


class TestCalendarGridContract(unittest.TestCase):
    def test_march_2024_monday_first(self) -> None:
        grid = build_month_grid(dt.date(2024, 3, 1), [], WeekStart.MONDAY, now=NOW)
        self.assertEqual(grid.first_date, dt.date(2024, 2, 26))
        self.assertEqual(grid.last_date, dt.date(2024, 3, 31))
        self.assertEqual(len(grid), 35)
        self.assertEqual(len(grid.weeks()), 5)

    def test_march_2024_sunday_first(self) -> None:
        grid = build_month_grid(dt.date(2024, 3, 20), [], WeekStart.SUNDAY, now=NOW)
        self.assertEqual(grid.first_date, dt.date(2024, 2, 25))
        self.assertEqual(grid.last_date, dt.date(2024, 4, 6))
        self.assertEqual(len(grid), 42)

    def test_month_that_fills_exact_weeks(self) -> None:
        # 2021-02-01 is a Monday and 2021-02-28 a Sunday.
        grid = build_month_grid(dt.date(2021, 2, 10), [], WeekStart.MONDAY, now=NOW)
        self.assertEqual(len(grid), 28)
        self.assertTrue(all(c.is_in_reference_month for c in grid))

    def test_grid_shape_holds_for_every_month(self) -> None:
        for ws in WeekStart:
            for year in range(2019, 2027):
                for month in range(1, 13):
                    grid = build_month_grid(dt.date(year, month, 1), [], ws, now=NOW)
                    dates = [c.calendar_date for c in grid]
                    self.assertEqual(len(dates) % 7, 0)
                    self.assertEqual(dates[0].weekday(), ws.first_weekday)
                    self.assertEqual(dates[-1].weekday(), ws.last_weekday)
                    for a, b in zip(dates, dates[1:]):
                        self.assertEqual((b - a).days, 1)
                    days_in_month = calendar.monthrange(year, month)[1]
                    self.assertIn(dt.date(year, month, 1), dates)
                    self.assertIn(dt.date(year, month, days_in_month), dates)
                    self.assertEqual(sum(1 for c in grid if c.is_in_reference_month), days_in_month)
                    self.assertLess(len(dates), 43)

    def test_event_lands_on_its_start_date_only(self) -> None:
        ev = _ev(1, "2024-03-15T14:30")
        grid = build_month_grid(dt.date(2024, 3, 1), [ev], WeekStart.MONDAY, now=NOW)
        hits = [c.calendar_date for c in grid if ev in c.events]
        self.assertEqual(hits, [dt.date(2024, 3, 15)])
        self.assertEqual(grid.dropped_event_count, 0)

    def test_unparseable_start_is_dropped_and_counted(self) -> None:
        bad = _ev(7, "not-a-date")
        grid = build_month_grid(dt.date(2024, 3, 1), [bad], WeekStart.MONDAY, now=NOW)
        self.assertEqual(len(grid), 35)
        self.assertFalse(any(c.events for c in grid))
        self.assertEqual(grid.dropped_event_count, 1)
        self.assertEqual(grid.dropped_event_ids, (7,))

    def test_missing_start_values_are_dropped(self) -> None:
        evs = [_ev(1, None), _ev(2, ""), _ev(3, "2024-02-30T10:00"), _ev(4, "2024-03-02")]
        grid = build_month_grid(dt.date(2024, 3, 1), evs, WeekStart.MONDAY, now=NOW)
        self.assertEqual(grid.dropped_event_count, 3)
        self.assertEqual([e.id for e in grid.cell_for(dt.date(2024, 3, 2)).events], [4])

    def test_events_outside_grid_are_not_placed_or_counted(self) -> None:
        evs = [_ev(1, "2024-05-01T09:00"), _ev(2, "2024-02-26T09:00")]
        grid = build_month_grid(dt.date(2024, 3, 1), evs, WeekStart.MONDAY, now=NOW)
        placed = [e.id for c in grid for e in c.events]
        self.assertEqual(placed, [2])
        self.assertFalse(grid[0].is_in_reference_month)
        self.assertEqual(grid.dropped_event_count, 0)

    def test_events_ordered_by_start_then_input_order(self) -> None:
        evs = [
            _ev(1, "2024-03-10T14:30"),
            _ev(2, "2024-03-10T09:00"),
            _ev(3, "2024-03-10T14:30"),
            _ev(4, "2024-03-10T14:30:00"),
        ]
        grid = build_month_grid(dt.date(2024, 3, 1), evs, WeekStart.MONDAY, now=NOW)
        self.assertEqual([e.id for e in grid.cell_for(dt.date(2024, 3, 10)).events], [2, 1, 3, 4])

    def test_every_parseable_event_appears_exactly_once(self) -> None:
        evs = [_ev(i, f"2024-03-{(i % 31) + 1:02d}T{i % 24:02d}:00") for i in range(100)]
        grid = build_month_grid(dt.date(2024, 3, 1), evs, WeekStart.SUNDAY, now=NOW)
        seen = [e.id for c in grid for e in c.events]
        self.assertEqual(sorted(seen), list(range(100)))
        for c in grid:
            for e in c.events:
                self.assertEqual(parse_event_start(e.start).value.date(), c.calendar_date)

    def test_aware_start_is_bucketed_in_given_tz(self) -> None:
        ev = _ev(1, "2024-03-15T01:30:00Z")
        brt = dt.timezone(dt.timedelta(hours=-3))
        grid = build_month_grid(dt.date(2024, 3, 1), [ev], WeekStart.MONDAY, now=NOW, tz=brt)
        self.assertEqual([e.id for e in grid.cell_for(dt.date(2024, 3, 14)).events], [1])
        self.assertEqual(grid.cell_for(dt.date(2024, 3, 15)).events, ())

    def test_today_flag_uses_injected_clock(self) -> None:
        grid = build_month_grid(dt.date(2024, 3, 1), [], WeekStart.MONDAY, now=NOW)
        today = [c.calendar_date for c in grid if c.is_today]
        self.assertEqual(today, [dt.date(2024, 3, 15)])

        later = fixed_clock(dt.datetime(2030, 1, 1, 12, 0))
        grid2 = build_month_grid(dt.date(2024, 3, 1), [], WeekStart.MONDAY, now=later)
        self.assertFalse(any(c.is_today for c in grid2))

    def test_today_flag_on_padding_day(self) -> None:
        clock = fixed_clock(dt.datetime(2024, 2, 27, 8, 0))
        grid = build_month_grid(dt.date(2024, 3, 1), [], WeekStart.MONDAY, now=clock)
        today = [c for c in grid if c.is_today]
        self.assertEqual(len(today), 1)
        self.assertFalse(today[0].is_in_reference_month)

    def test_idempotent_and_does_not_mutate_input(self) -> None:
        evs = [_ev(1, "2024-03-15T14:30"), _ev(2, "bad"), _ev(3, "2024-03-01T08:00")]
        before = copy.deepcopy(evs)
        g1 = build_month_grid(dt.date(2024, 3, 1), evs, WeekStart.MONDAY, now=NOW)
        g2 = build_month_grid(dt.date(2024, 3, 1), evs, WeekStart.MONDAY, now=NOW)
        self.assertEqual(g1, g2)
        self.assertEqual(g1.to_dict(), g2.to_dict())
        self.assertEqual(evs, before)

    def test_reference_date_forms(self) -> None:
        a = build_month_grid("2024-03", [], WeekStart.MONDAY, now=NOW)
        b = build_month_grid("2024-03-28", [], WeekStart.MONDAY, now=NOW)
        c = build_month_grid(dt.datetime(2024, 3, 31, 23, 59), [], "monday", now=NOW)
        self.assertEqual(a, b)
        self.assertEqual(a, c)

    def test_invalid_reference_date_raises(self) -> None:
        for bad in (None, 42, "garbage", "2024-13", "2024-00-10", ""):
            with self.assertRaises(InvalidReferenceDate):
                build_month_grid(bad, [], WeekStart.MONDAY, now=NOW)

    def test_reference_month_at_calendar_limits(self) -> None:
        with self.assertRaises(InvalidReferenceDate):
            build_month_grid(dt.date(1, 1, 1), [], WeekStart.SUNDAY, now=NOW)
        grid = build_month_grid(dt.date(1, 1, 1), [], WeekStart.MONDAY, now=NOW)
        self.assertEqual(grid.first_date, dt.date(1, 1, 1))


class TestParseEventStartContract(unittest.TestCase):
    def test_tagged_result(self) -> None:
        ok = parse_event_start("2024-03-15T14:30")
        self.assertTrue(ok.ok)
        self.assertEqual(ok.value, dt.datetime(2024, 3, 15, 14, 30))

        bad = parse_event_start("not-a-date")
        self.assertFalse(bad.ok)
        self.assertIsNone(bad.value)
        self.assertEqual(bad.raw, "not-a-date")

    def test_date_only_reads_as_midnight(self) -> None:
        p = parse_event_start("2024-03-15")
        self.assertEqual(p.value, dt.datetime(2024, 3, 15))


class TestMonthCursorContract(unittest.TestCase):
    def test_navigation_wraps_years(self) -> None:
        self.assertEqual(MonthCursor(2024, 1).previous(), MonthCursor(2023, 12))
        self.assertEqual(MonthCursor(2023, 12).next(), MonthCursor(2024, 1))
        self.assertEqual(MonthCursor(2024, 3).shift(-15), MonthCursor(2022, 12))

    def test_today_and_labels(self) -> None:
        cur = MonthCursor.today(NOW)
        self.assertEqual(cur, MonthCursor(2024, 3))
        self.assertEqual(cur.key(), "2024-03")
        self.assertEqual(cur.label(), "Março de 2024")
        self.assertEqual(cur.first_day, dt.date(2024, 3, 1))

    def test_invalid_month_rejected(self) -> None:
        with self.assertRaises(InvalidReferenceDate):
            MonthCursor(2024, 13)

    def test_year_outside_calendar_rejected(self) -> None:
        with self.assertRaises(InvalidReferenceDate):
            MonthCursor(0, 1)
        with self.assertRaises(InvalidReferenceDate):
            MonthCursor(2024, 1).shift(-2024 * 12)
        with self.assertRaises(InvalidReferenceDate):
            MonthCursor(9999, 12).next()
        self.assertEqual(MonthCursor(1, 2).previous().first_day, dt.date(1, 1, 1))

    def test_last_supported_month_that_overflows_the_grid(self) -> None:
        # 9999-12-31 is a Friday, so the trailing padding runs past date.max.
        with self.assertRaises(InvalidReferenceDate):
            build_month_grid(MonthCursor(9999, 12).first_day, [], WeekStart.MONDAY, now=NOW)


if __name__ == "__main__":
    unittest.main(verbosity=2)
