"""Splitting a period's logs into overdue, upcoming and completed."""

from datetime import date, datetime
from typing import Iterable, Optional

from paytrack.models.payment import GroupedLogs, PaymentLog


def group_logs(
    logs: Iterable[PaymentLog],
    today: Optional[date] = None,
) -> GroupedLogs:
    """
    Group logs for display.

    Completed logs come newest completion first. Incomplete logs due before
    today are overdue; the rest are upcoming. Both are sorted by due date.
    """
    cutoff = datetime.combine(today or date.today(), datetime.min.time())

    overdue = []
    upcoming = []
    completed = []
    for log in logs:
        if log.is_completed:
            completed.append(log)
        elif log.due_date < cutoff:
            overdue.append(log)
        else:
            upcoming.append(log)

    overdue.sort(key=lambda log: log.due_date)
    upcoming.sort(key=lambda log: log.due_date)
    completed.sort(
        key=lambda log: log.completed_date or datetime.min,
        reverse=True,
    )
    return GroupedLogs(overdue=overdue, upcoming=upcoming, completed=completed)
