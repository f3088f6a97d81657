"""Per-period account balance record."""

from pydantic import Field

from paytrack.models.base import Money, RecordModel


class PeriodBalance(RecordModel):
    """The account balance the user entered for one period."""

    period_key: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="ISO date of the period start"
    )
    current_account_balance: Money = Field(
        ...,
        description="Balance as entered; may be negative"
    )
