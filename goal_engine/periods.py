"""
Period Calculator Module
Turns a period kind and a reference instant into an inclusive date interval
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from .models import PeriodKind


@dataclass(frozen=True)
class Period:
    """Inclusive calendar interval; the end date runs until the end of the day."""

    start_date: date
    end_date: date

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.start_date, time.min)

    @property
    def end_datetime(self) -> datetime:
        return datetime.combine(self.end_date, time.max)

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1


def _last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def period_dates(period: Union[PeriodKind, str],
                 reference: Optional[Union[date, datetime]] = None) -> Period:
    """
    Calculate the interval a goal of the given period covers

    Args:
        period: daily, weekly, monthly or quarterly
        reference: Instant inside the wanted period (default: now)

    Returns:
        Period with inclusive start and end dates

    Raises:
        ValueError: Unknown period kind
    """
    period = PeriodKind(period)
    if reference is None:
        reference = datetime.now()
    day = reference.date() if isinstance(reference, datetime) else reference

    if period is PeriodKind.DAILY:
        return Period(day, day)

    if period is PeriodKind.WEEKLY:
        # Sunday-indexed: Sunday is day 0 of the week
        days_since_sunday = (day.weekday() + 1) % 7
        start = day - timedelta(days=days_since_sunday)
        return Period(start, start + timedelta(days=6))

    if period is PeriodKind.MONTHLY:
        return Period(day.replace(day=1), _last_day_of_month(day.year, day.month))

    if period is PeriodKind.QUARTERLY:
        first_month = ((day.month - 1) // 3) * 3 + 1
        return Period(
            date(day.year, first_month, 1),
            _last_day_of_month(day.year, first_month + 2),
        )

    raise ValueError(f"Unsupported period: {period}")
