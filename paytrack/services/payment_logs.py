"""
Payment Log Store

Owns the payment_logs collection: materializing recurring payments into
a period, one-time payments, completion toggling, amount edits and
deletion. Unknown ids are silently ignored by every mutating operation.

Deleting a log created from a recurring payment also records a deletion
marker for that (payment, period) pair, so the next materialization pass
does not quietly bring the log back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Union

from paytrack.engine.forecast import calculate_forecast
from paytrack.engine.materializer import LogSlot, plan_missing_logs
from paytrack.models.base import to_decimal
from paytrack.models.payment import (
    ForecastData,
    PaymentLog,
    PaymentLogExclusion,
    RecurringPayment,
)
from paytrack.models.period import MonthPeriod
from paytrack.periods.calculator import get_period_key
from paytrack.services.collection import CollectionService
from paytrack.services.storage.interface import KeyValueStore


PAYMENT_LOGS_KEY = "payment_logs"
PAYMENT_LOG_EXCLUSIONS_KEY = "payment_log_exclusions"

_MANAGED_FIELDS = {"id", "created_at"}


class PaymentLogService(CollectionService[PaymentLog]):
    """CRUD over payment logs plus per-period materialization."""

    key = PAYMENT_LOGS_KEY
    model = PaymentLog

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__(store)
        self._clock = clock

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_all(self) -> list[PaymentLog]:
        """Every log in stored order."""
        return await self._load()

    async def get_by_id(self, log_id: str) -> Optional[PaymentLog]:
        for log in await self._load():
            if log.id == log_id:
                return log
        return None

    async def get_logs_by_period(self, period: MonthPeriod) -> list[PaymentLog]:
        """Logs belonging to a period, sorted by due date."""
        key = get_period_key(period)
        logs = [log for log in await self._load() if log.period_key == key]
        return sorted(logs, key=lambda log: log.due_date)

    async def get_exclusions(self) -> list[PaymentLogExclusion]:
        raw = await self._store.get(PAYMENT_LOG_EXCLUSIONS_KEY) or []
        return [PaymentLogExclusion.model_validate(item) for item in raw]

    # -------------------------------------------------------------------------
    # Materialization
    # -------------------------------------------------------------------------

    async def ensure_logs_for_period(
        self,
        period: MonthPeriod,
        recurring_payments: Iterable[RecurringPayment],
    ) -> list[PaymentLog]:
        """
        Make sure every active recurring payment has a log in the period.

        Safe to call any number of times: a payment that already has a log
        for the period (or was deliberately removed from it) is skipped, and
        inactive payments never get logs. Nothing is written when nothing
        is missing.

        Returns:
            The logs created by this call
        """
        logs = await self._load()
        excluded: set[LogSlot] = {
            (marker.recurring_payment_id, marker.period_key)
            for marker in await self.get_exclusions()
        }

        created = plan_missing_logs(period, recurring_payments, logs, excluded)
        if not created:
            return []

        now = self._clock()
        created = [log.model_copy(update={"created_at": now}) for log in created]
        await self._save(logs + created)

        self._logger.info(
            "payment_logs_materialized",
            period_key=get_period_key(period),
            created=len(created),
        )
        return created

    # -------------------------------------------------------------------------
    # Create / update / delete
    # -------------------------------------------------------------------------

    def _new_log(self, data: Union[dict[str, Any], PaymentLog]) -> PaymentLog:
        if isinstance(data, PaymentLog):
            data = data.model_dump()
        fields = {
            k: v for k, v in PaymentLog.normalize_keys(data).items()
            if k not in _MANAGED_FIELDS
        }
        return PaymentLog.model_validate({**fields, "created_at": self._clock()})

    async def create(self, data: Union[dict[str, Any], PaymentLog]) -> PaymentLog:
        """Store a new log; id and created_at are assigned here."""
        log = self._new_log(data)
        logs = await self._load()
        logs.append(log)
        await self._save(logs)
        self._logger.info(
            "payment_log_created",
            log_id=log.id,
            period_key=log.period_key,
            one_time=log.is_one_time,
        )
        return log

    async def create_multiple(
        self,
        items: Iterable[Union[dict[str, Any], PaymentLog]],
    ) -> list[PaymentLog]:
        """Store several new logs with a single write."""
        new_logs = [self._new_log(item) for item in items]
        if not new_logs:
            return []
        logs = await self._load()
        await self._save(logs + new_logs)
        self._logger.info("payment_logs_created", count=len(new_logs))
        return new_logs

    async def update(self, log_id: str, changes: dict[str, Any]) -> Optional[PaymentLog]:
        """
        Apply field changes to a log.

        Returns:
            The updated log, or None if the id is unknown
        """
        logs = await self._load()
        idx = self._index_of(logs, log_id)
        if idx is None:
            self._logger.debug("payment_log_not_found", log_id=log_id)
            return None

        changes = PaymentLog.normalize_keys(changes)
        current = logs[idx].model_dump()
        current.update({k: v for k, v in changes.items() if k not in _MANAGED_FIELDS})
        logs[idx] = PaymentLog.model_validate(current)
        await self._save(logs)
        return logs[idx]

    async def update_log_amount(
        self,
        log_id: str,
        amount: Union[Decimal, int, float],
    ) -> Optional[PaymentLog]:
        """Change only the amount of a log."""
        log = await self.update(log_id, {"amount": to_decimal(amount)})
        if log is not None:
            self._logger.info("payment_log_amount_updated", log_id=log_id)
        return log

    async def mark_as_completed(self, log_id: str) -> Optional[PaymentLog]:
        """Mark a log paid/received now."""
        return await self.update(
            log_id, {"is_completed": True, "completed_date": self._clock()}
        )

    async def mark_as_incomplete(self, log_id: str) -> Optional[PaymentLog]:
        """Undo completion and clear the completion date."""
        return await self.update(
            log_id, {"is_completed": False, "completed_date": None}
        )

    async def delete(self, log_id: str, exclude: bool = True) -> None:
        """
        Remove a log.

        Args:
            log_id: Log to remove; unknown ids are ignored
            exclude: For recurring-derived logs, also stop the payment from
                     being materialized into this period again
        """
        logs = await self._load()
        idx = self._index_of(logs, log_id)
        if idx is None:
            self._logger.debug("payment_log_not_found", log_id=log_id)
            return

        removed = logs.pop(idx)
        await self._save(logs)
        if exclude and removed.recurring_payment_id is not None:
            await self._add_exclusion(removed.recurring_payment_id, removed.period_key)
        self._logger.info(
            "payment_log_deleted",
            log_id=log_id,
            period_key=removed.period_key,
            excluded=exclude and not removed.is_one_time,
        )

    async def restore_to_period(self, recurring_payment_id: str, period: MonthPeriod) -> None:
        """Drop a deletion marker so the payment materializes into the period again."""
        key = get_period_key(period)
        markers = await self.get_exclusions()
        remaining = [
            m for m in markers
            if not (m.recurring_payment_id == recurring_payment_id and m.period_key == key)
        ]
        if len(remaining) != len(markers):
            await self._store.set(
                PAYMENT_LOG_EXCLUSIONS_KEY, [m.to_storage() for m in remaining]
            )

    async def _add_exclusion(self, recurring_payment_id: str, period_key: str) -> None:
        markers = await self.get_exclusions()
        if any(
            m.recurring_payment_id == recurring_payment_id and m.period_key == period_key
            for m in markers
        ):
            return
        markers.append(
            PaymentLogExclusion(
                recurring_payment_id=recurring_payment_id,
                period_key=period_key,
            )
        )
        await self._store.set(
            PAYMENT_LOG_EXCLUSIONS_KEY, [m.to_storage() for m in markers]
        )

    # -------------------------------------------------------------------------
    # Forecast
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_forecast(
        current_balance: Union[Decimal, int, float],
        logs: Iterable[PaymentLog],
    ) -> ForecastData:
        """Forecast for a set of logs; see paytrack.engine.forecast."""
        return calculate_forecast(current_balance, logs)
