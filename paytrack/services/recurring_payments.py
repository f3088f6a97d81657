"""
Recurring Payment Store

Holds the payment templates. Deleting a template is a soft delete
(is_active=False) so logs created from it keep a valid back-reference;
permanent_delete removes the record itself.
"""

from datetime import datetime
from typing import Any, Callable, Optional

from paytrack.models.payment import PaymentType, RecurringPayment
from paytrack.services.collection import CollectionService
from paytrack.services.storage.interface import KeyValueStore


RECURRING_PAYMENTS_KEY = "recurring_payments"

# Fields callers may not set through create/update
_MANAGED_FIELDS = {"id", "created_at"}


class RecurringPaymentService(CollectionService[RecurringPayment]):
    """CRUD over the recurring payment templates."""

    key = RECURRING_PAYMENTS_KEY
    model = RecurringPayment

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__(store)
        self._clock = clock

    async def get_all(self) -> list[RecurringPayment]:
        """All templates, active or not, in stored order."""
        return await self._load()

    async def get_by_id(self, payment_id: str) -> Optional[RecurringPayment]:
        """A template by id, or None."""
        for payment in await self._load():
            if payment.id == payment_id:
                return payment
        return None

    async def get_by_type(self, payment_type: PaymentType) -> list[RecurringPayment]:
        """Active templates of one type, sorted by day of month."""
        payment_type = PaymentType(payment_type)
        payments = [
            p for p in await self._load()
            if p.is_active and p.type == payment_type
        ]
        return sorted(payments, key=lambda p: p.day_of_month)

    async def get_all_sorted_by_day(self) -> list[RecurringPayment]:
        """All active templates, sorted by day of month."""
        payments = [p for p in await self._load() if p.is_active]
        return sorted(payments, key=lambda p: p.day_of_month)

    async def create(self, data: dict[str, Any]) -> RecurringPayment:
        """
        Create a template.

        Args:
            data: Template fields (name, default_amount, day_of_month,
                  icon_name, type); id and created_at are assigned here

        Returns:
            The stored template
        """
        fields = {
            k: v for k, v in RecurringPayment.normalize_keys(data).items()
            if k not in _MANAGED_FIELDS
        }
        fields.setdefault("is_active", True)
        payment = RecurringPayment.model_validate(
            {**fields, "created_at": self._clock()}
        )

        payments = await self._load()
        payments.append(payment)
        await self._save(payments)

        self._logger.info(
            "recurring_payment_created",
            payment_id=payment.id,
            day_of_month=payment.day_of_month,
            type=payment.type.value,
        )
        return payment

    async def update(self, payment_id: str, changes: dict[str, Any]) -> Optional[RecurringPayment]:
        """
        Apply field changes to a template.

        Unknown ids are ignored.

        Returns:
            The updated template, or None if it does not exist
        """
        payments = await self._load()
        idx = self._index_of(payments, payment_id)
        if idx is None:
            self._logger.debug("recurring_payment_not_found", payment_id=payment_id)
            return None

        current = payments[idx].model_dump()
        changes = RecurringPayment.normalize_keys(changes)
        current.update({k: v for k, v in changes.items() if k not in _MANAGED_FIELDS})
        payments[idx] = RecurringPayment.model_validate(current)
        await self._save(payments)

        self._logger.info(
            "recurring_payment_updated",
            payment_id=payment_id,
            fields=sorted(changes),
        )
        return payments[idx]

    async def delete(self, payment_id: str) -> None:
        """Soft delete: the template stops producing logs but is kept."""
        await self.update(payment_id, {"is_active": False})

    async def permanent_delete(self, payment_id: str) -> None:
        """Remove a template entirely. Existing logs are left alone."""
        payments = await self._load()
        remaining = [p for p in payments if p.id != payment_id]
        if len(remaining) == len(payments):
            self._logger.debug("recurring_payment_not_found", payment_id=payment_id)
            return
        await self._save(remaining)
        self._logger.info("recurring_payment_purged", payment_id=payment_id)
