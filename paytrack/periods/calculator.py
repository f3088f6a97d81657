"""
Month Period Calculator

A user's "month" starts on a configurable day (typically payday) rather
than on the 1st. Everything here is a pure function of its arguments:
the month start day is always passed in explicitly.

RULES:
1. A period starts at midnight on the start day and ends 1 ms before the
   next period starts, so consecutive periods never overlap or leave gaps.
2. A start day past the end of a month clamps to that month's last day
   (start day 31 gives Feb 29 in 2024, Apr 30 in April).
3. A reference date that falls exactly on the start day belongs to the
   period starting that day.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from paytrack.models.period import MonthPeriod


MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

MIN_DAY = 1
MAX_DAY = 31

# period_end is the next period start minus this
PERIOD_END_OFFSET = timedelta(milliseconds=1)


# =============================================================================
# CALENDAR HELPERS
# =============================================================================

def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """The given day of the month, or the month's last day if it is shorter."""
    return date(year, month, min(day, days_in_month(year, month)))


def _shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    total = year * 12 + (month - 1) + months
    return total // 12, total % 12 + 1


def _check_day(day: int, name: str) -> None:
    if not MIN_DAY <= day <= MAX_DAY:
        raise ValueError(f"{name} must be between {MIN_DAY} and {MAX_DAY}, got {day}")


def _to_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def format_period_label(start: date, end: date) -> str:
    """
    Label like 'Jan 15 - Feb 14, 2024'.

    Periods crossing a year boundary name both years:
    'Dec 15, 2023 - Jan 14, 2024'.
    """
    start_month = MONTH_ABBREVIATIONS[start.month - 1]
    end_month = MONTH_ABBREVIATIONS[end.month - 1]
    if start.year == end.year:
        return f"{start_month} {start.day} - {end_month} {end.day}, {end.year}"
    return (
        f"{start_month} {start.day}, {start.year} - "
        f"{end_month} {end.day}, {end.year}"
    )


# =============================================================================
# PERIOD ARITHMETIC
# =============================================================================

def _build_period(start: date, start_day: int) -> MonthPeriod:
    next_year, next_month = _shift_month(start.year, start.month, 1)
    next_start = clamp_day(next_year, next_month, start_day)

    period_start = datetime.combine(start, time.min)
    period_end = datetime.combine(next_start, time.min) - PERIOD_END_OFFSET

    return MonthPeriod(
        period_start=period_start,
        period_end=period_end,
        display_label=format_period_label(start, period_end.date()),
        month_start_day=start_day,
    )


def get_current_period(
    start_day: int,
    reference_date: Optional[Union[date, datetime]] = None,
) -> MonthPeriod:
    """
    Get the period containing reference_date (default: now).

    Args:
        start_day: Configured month start day (1-31)
        reference_date: Any date or datetime inside the wanted period

    Returns:
        The MonthPeriod containing reference_date

    Raises:
        ValueError: If start_day is outside 1-31
    """
    _check_day(start_day, "Month start day")
    reference = _to_date(reference_date or datetime.now())

    this_month_start = clamp_day(reference.year, reference.month, start_day)
    if reference.day >= this_month_start.day:
        return _build_period(this_month_start, start_day)

    prev_year, prev_month = _shift_month(reference.year, reference.month, -1)
    return _build_period(clamp_day(prev_year, prev_month, start_day), start_day)


def _shift_period(period: MonthPeriod, months: int) -> MonthPeriod:
    start_day = period.start_day
    year, month = _shift_month(
        period.period_start.year, period.period_start.month, months
    )
    return get_current_period(start_day, clamp_day(year, month, start_day))


def get_next_period(period: MonthPeriod) -> MonthPeriod:
    """The period immediately after the given one."""
    return _shift_period(period, 1)


def get_previous_period(period: MonthPeriod) -> MonthPeriod:
    """The period immediately before the given one."""
    return _shift_period(period, -1)


def calculate_due_date(day_of_month: int, period: MonthPeriod) -> datetime:
    """
    Date inside the period on which a payment due on day_of_month falls.

    Days on or after the period's first day fall in the start month; earlier
    days fall in the following month. The day is clamped to the month's
    length (31 in April gives April 30). The time is always midnight.
    """
    _check_day(day_of_month, "Day of month")
    start = period.period_start
    if day_of_month >= start.day:
        year, month = start.year, start.month
    else:
        year, month = _shift_month(start.year, start.month, 1)
    return datetime.combine(clamp_day(year, month, day_of_month), time.min)


def get_period_key(period: MonthPeriod) -> str:
    """ISO date (YYYY-MM-DD) of the period start; the join key for storage."""
    return period.period_start.date().isoformat()


def period_contains(period: MonthPeriod, moment: Union[date, datetime]) -> bool:
    """Check whether a date or instant falls inside the period."""
    if not isinstance(moment, datetime):
        moment = datetime.combine(moment, time.min)
    return period.period_start <= moment <= period.period_end
