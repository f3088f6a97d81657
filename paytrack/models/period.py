"""
Month Period Model

A period is the user's own "month": it starts on a configurable day of
the month rather than on the 1st. Periods are computed on demand by
paytrack.periods.calculator and are never stored; the period key (the
ISO date of period_start) is what other records use to refer to one.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from paytrack.models.base import RecordModel


class MonthPeriod(RecordModel):
    """
    A contiguous monthly period.

    period_start is midnight of its first day; period_end is
    23:59:59.999 of the day before the next period starts.
    """

    period_start: datetime = Field(
        ...,
        description="Midnight of the first day of the period"
    )
    period_end: datetime = Field(
        ...,
        description="Last millisecond of the last day of the period"
    )
    display_label: str = Field(
        default="",
        description="Human readable label, e.g. 'Jan 15 - Feb 14, 2024'"
    )
    # Clamping can move period_start off the configured day (31 -> Feb 29),
    # so the configured day travels with the period when it is known.
    month_start_day: Optional[int] = Field(
        default=None,
        ge=1,
        le=31,
        description="Configured month start day this period was computed from"
    )

    @model_validator(mode='after')
    def validate_bounds(self) -> 'MonthPeriod':
        """Validate the period is not inverted."""
        if self.period_end < self.period_start:
            raise ValueError("Period end cannot be before period start")
        return self

    @property
    def start_day(self) -> int:
        """Month start day used for next/previous arithmetic."""
        return self.month_start_day or self.period_start.day
