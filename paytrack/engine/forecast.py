"""
Forecast Engine

Projects the end-of-period balance from the balance the user entered and
the period's payment logs. Completed logs are assumed to be reflected in
the entered balance already, so only pending logs move the forecast.
"""

from decimal import Decimal
from typing import Iterable, Union

from paytrack.models.base import to_decimal
from paytrack.models.payment import (
    ForecastData,
    ForecastStatus,
    PaymentLog,
    PaymentType,
)


# Forecasts down to this much below zero are a warning rather than danger
WARNING_FLOOR = Decimal("-100")


def calculate_forecast(
    current_balance: Union[Decimal, int, float],
    logs: Iterable[PaymentLog],
) -> ForecastData:
    """
    Compute pending totals and the forecasted balance.

    forecasted_balance = current_balance - pending_expenses + pending_income
    """
    balance = to_decimal(current_balance)
    pending_expenses = Decimal("0")
    pending_income = Decimal("0")

    for log in logs:
        if log.is_completed:
            continue
        if log.type == PaymentType.EXPENSE:
            pending_expenses += log.amount
        elif log.type == PaymentType.INCOME:
            pending_income += log.amount

    return ForecastData(
        pending_expenses=pending_expenses,
        pending_income=pending_income,
        forecasted_balance=balance - pending_expenses + pending_income,
    )


def forecast_status(forecast: ForecastData) -> ForecastStatus:
    """Traffic-light status for a forecast."""
    if forecast.forecasted_balance >= 0:
        return ForecastStatus.SUCCESS
    if forecast.forecasted_balance >= WARNING_FLOOR:
        return ForecastStatus.WARNING
    return ForecastStatus.DANGER
