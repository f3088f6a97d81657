"""
Payment Log Materializer

Works out which logs a period is missing. Every active recurring payment
gets exactly one log per period; a payment that already has a log for the
period, or that the user removed from it, is left alone. Nothing here
touches storage: PaymentLogService persists the result.
"""

from typing import Collection, Iterable, Optional

from paytrack.models.payment import PaymentLog, RecurringPayment
from paytrack.models.period import MonthPeriod
from paytrack.periods.calculator import calculate_due_date, get_period_key


LogSlot = tuple[str, str]  # (recurring_payment_id, period_key)


def existing_slots(logs: Iterable[PaymentLog]) -> set[LogSlot]:
    """The (recurring payment, period) pairs that already have a log."""
    return {
        (log.recurring_payment_id, log.period_key)
        for log in logs
        if log.recurring_payment_id is not None
    }


def build_log(payment: RecurringPayment, period: MonthPeriod) -> PaymentLog:
    """Instantiate a recurring payment for one period."""
    return PaymentLog(
        recurring_payment_id=payment.id,
        name=payment.name,
        amount=payment.default_amount,
        due_date=calculate_due_date(payment.day_of_month, period),
        is_completed=False,
        icon_name=payment.icon_name,
        day_of_month=payment.day_of_month,
        type=payment.type,
        period_start=period.period_start,
        period_end=period.period_end,
    )


def plan_missing_logs(
    period: MonthPeriod,
    payments: Iterable[RecurringPayment],
    existing_logs: Iterable[PaymentLog],
    excluded: Optional[Collection[LogSlot]] = None,
) -> list[PaymentLog]:
    """
    Logs that must be created so every active payment has one in the period.

    Args:
        period: Period to fill
        payments: Recurring payments; inactive ones are skipped
        existing_logs: Logs already stored (any period)
        excluded: Slots the user deleted on purpose

    Returns:
        New, unsaved logs in payment order
    """
    key = get_period_key(period)
    taken = existing_slots(existing_logs)
    if excluded:
        taken.update(excluded)

    planned = []
    for payment in payments:
        if not payment.is_active:
            continue
        slot = (payment.id, key)
        if slot in taken:
            continue
        planned.append(build_log(payment, period))
        # Guards against the same template appearing twice in the input
        taken.add(slot)
    return planned
