"""Period calculation package."""

from paytrack.periods.calculator import (
    calculate_due_date,
    clamp_day,
    days_in_month,
    format_period_label,
    get_current_period,
    get_next_period,
    get_period_key,
    get_previous_period,
    period_contains,
)

__all__ = [
    "calculate_due_date",
    "clamp_day",
    "days_in_month",
    "format_period_label",
    "get_current_period",
    "get_next_period",
    "get_period_key",
    "get_previous_period",
    "period_contains",
]
