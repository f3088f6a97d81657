"""
Payment Models

RecurringPayment is a template ("rent, 1200, due on the 1st") and
PaymentLog is one instance of a payment inside one period. Logs copy the
template's name, amount, icon and type when they are created, so later
edits to the template never rewrite history.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from paytrack.models.base import LocalDateTime, Money, RecordModel


def new_id() -> str:
    """Generate a record identifier."""
    return str(uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class PaymentType(str, Enum):
    """Direction of a payment relative to the account."""
    EXPENSE = "expense"
    INCOME = "income"


class ForecastStatus(str, Enum):
    """Traffic-light status for a forecasted balance."""
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


# =============================================================================
# RECORDS
# =============================================================================

class RecurringPayment(RecordModel):
    """
    A payment template that produces one log per period.

    Deleting a template only flips is_active, because past logs still
    point at it through recurring_payment_id.
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name, e.g. 'Rent'"
    )
    default_amount: Money = Field(
        default=Decimal("0"),
        description="Amount copied into each new log"
    )
    day_of_month: int = Field(
        ...,
        ge=1,
        le=31,
        description="Day the payment is due; clamped in short months"
    )
    icon_name: str = Field(default="cash")
    type: PaymentType = Field(default=PaymentType.EXPENSE)
    created_at: LocalDateTime = Field(default_factory=datetime.now)
    is_active: bool = True


class PaymentLog(RecordModel):
    """
    One payment inside one period.

    recurring_payment_id is None for one-time payments. For recurring
    ones, at most one log exists per (recurring_payment_id, period key).
    """

    id: str = Field(default_factory=new_id)
    recurring_payment_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    amount: Money
    due_date: LocalDateTime
    is_completed: bool = False
    completed_date: Optional[LocalDateTime] = None
    icon_name: str = Field(default="cash")
    day_of_month: int = Field(..., ge=1, le=31)
    type: PaymentType = Field(default=PaymentType.EXPENSE)
    period_start: LocalDateTime
    period_end: LocalDateTime
    created_at: LocalDateTime = Field(default_factory=datetime.now)

    @property
    def period_key(self) -> str:
        """Key of the period this log belongs to."""
        return self.period_start.date().isoformat()

    @property
    def is_one_time(self) -> bool:
        return self.recurring_payment_id is None


class PaymentLogExclusion(RecordModel):
    """Marks a recurring payment as deliberately removed from one period."""

    recurring_payment_id: str
    period_key: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")


# =============================================================================
# DERIVED VALUES (never persisted)
# =============================================================================

class ForecastData(BaseModel):
    """End-of-period projection for one period."""

    pending_expenses: Decimal = Field(
        default=Decimal("0"),
        description="Sum of incomplete expense logs"
    )
    pending_income: Decimal = Field(
        default=Decimal("0"),
        description="Sum of incomplete income logs"
    )
    forecasted_balance: Decimal = Field(
        default=Decimal("0"),
        description="Balance once every pending log settles"
    )


class GroupedLogs(BaseModel):
    """Logs of one period split the way the tracker shows them."""

    overdue: list[PaymentLog] = Field(default_factory=list)
    upcoming: list[PaymentLog] = Field(default_factory=list)
    completed: list[PaymentLog] = Field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.overdue) + len(self.upcoming) + len(self.completed)
