"""
Data Models Package

This package contains all Pydantic models used by PayTrack.
Everything written to the key-value store conforms to these schemas.
"""

from paytrack.models.balance import PeriodBalance
from paytrack.models.base import RecordModel, to_decimal
from paytrack.models.payment import (
    ForecastData,
    ForecastStatus,
    GroupedLogs,
    PaymentLog,
    PaymentLogExclusion,
    PaymentType,
    RecurringPayment,
)
from paytrack.models.period import MonthPeriod
from paytrack.models.preferences import DEFAULT_APP_SETTINGS, AppSettings, Language
from paytrack.models.validation import InputResult, ValidationIssue

__all__ = [
    # Records
    "AppSettings",
    "DEFAULT_APP_SETTINGS",
    "Language",
    "MonthPeriod",
    "PaymentLog",
    "PaymentLogExclusion",
    "PaymentType",
    "PeriodBalance",
    "RecordModel",
    "RecurringPayment",
    # Derived values
    "ForecastData",
    "ForecastStatus",
    "GroupedLogs",
    # Validation
    "InputResult",
    "ValidationIssue",
    # Helpers
    "to_decimal",
]
