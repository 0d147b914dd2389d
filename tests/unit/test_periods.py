"""
Test Suite: Period Calculator
"""

import calendar
from datetime import date, datetime, timedelta

import pytest
from freezegun import freeze_time

from goal_engine.models import PeriodKind
from goal_engine.periods import Period, period_dates


class TestPeriodDates:
    """Intervals for every period kind"""

    @pytest.mark.parametrize("reference", [
        datetime(2025, 1, 15, 13, 30),
        datetime(2024, 2, 29, 0, 0),
        datetime(2025, 12, 31, 23, 59),
        datetime(2025, 6, 1, 8, 0),
    ])
    @pytest.mark.parametrize("period", list(PeriodKind))
    def test_start_never_after_end(self, period, reference):
        interval = period_dates(period, reference)
        assert interval.start_date <= interval.end_date
        assert interval.start_date <= reference.date() <= interval.end_date

    def test_daily(self):
        interval = period_dates(PeriodKind.DAILY, datetime(2025, 3, 10, 17, 45))
        assert interval == Period(date(2025, 3, 10), date(2025, 3, 10))
        assert interval.start_datetime == datetime(2025, 3, 10, 0, 0)
        assert interval.end_datetime.date() == date(2025, 3, 10)
        assert (interval.end_datetime.hour, interval.end_datetime.minute, interval.end_datetime.second) == (23, 59, 59)

    def test_weekly_starts_on_sunday(self):
        # 2025-01-15 is a Wednesday
        interval = period_dates(PeriodKind.WEEKLY, datetime(2025, 1, 15))
        assert interval.start_date == date(2025, 1, 12)
        assert interval.start_date.weekday() == calendar.SUNDAY
        assert interval.end_date == date(2025, 1, 18)
        assert interval.days == 7

    def test_weekly_on_a_sunday(self):
        interval = period_dates(PeriodKind.WEEKLY, date(2025, 1, 12))
        assert interval.start_date == date(2025, 1, 12)
        assert interval.end_date == date(2025, 1, 18)

    def test_weekly_across_month_boundary(self):
        interval = period_dates(PeriodKind.WEEKLY, date(2025, 2, 1))
        assert interval.start_date == date(2025, 1, 26)
        assert interval.end_date == date(2025, 2, 1)

    @pytest.mark.parametrize("reference, last_day", [
        (date(2025, 1, 15), 31),
        (date(2025, 2, 10), 28),
        (date(2024, 2, 10), 29),
        (date(2025, 4, 30), 30),
    ])
    def test_monthly_spans_calendar_month(self, reference, last_day):
        interval = period_dates(PeriodKind.MONTHLY, reference)
        assert interval.start_date == reference.replace(day=1)
        assert interval.end_date == reference.replace(day=last_day)
        assert interval.days == last_day

    @pytest.mark.parametrize("reference, start, end", [
        (date(2025, 1, 1), date(2025, 1, 1), date(2025, 3, 31)),
        (date(2025, 5, 20), date(2025, 4, 1), date(2025, 6, 30)),
        (date(2025, 9, 30), date(2025, 7, 1), date(2025, 9, 30)),
        (date(2025, 11, 2), date(2025, 10, 1), date(2025, 12, 31)),
    ])
    def test_quarterly(self, reference, start, end):
        interval = period_dates(PeriodKind.QUARTERLY, reference)
        assert (interval.start_date, interval.end_date) == (start, end)

    def test_accepts_string_period(self):
        assert period_dates("monthly", date(2025, 1, 15)).end_date == date(2025, 1, 31)

    def test_unknown_period_fails_fast(self):
        with pytest.raises(ValueError):
            period_dates("yearly", date(2025, 1, 15))

    @freeze_time("2025-07-04 10:00:00")
    def test_defaults_to_now(self):
        interval = period_dates(PeriodKind.MONTHLY)
        assert interval.start_date == date(2025, 7, 1)
        assert interval.end_date == date(2025, 7, 31)
        assert interval.end_datetime - interval.start_datetime < timedelta(days=31)
