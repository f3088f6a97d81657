"""Tests for the recurring payment, payment log and balance stores."""

import asyncio
from datetime import date, datetime
from decimal import Decimal

import pytest

from paytrack.models import PaymentType
from paytrack.periods import get_current_period, get_next_period
from paytrack.services import (
    PAYMENT_LOG_EXCLUSIONS_KEY,
    PAYMENT_LOGS_KEY,
    PERIOD_BALANCES_KEY,
    RECURRING_PAYMENTS_KEY,
    InMemoryKeyValueStore,
    PaymentLogService,
    RecurringPaymentService,
    StorageError,
)


JANUARY = get_current_period(1, date(2024, 1, 15))
FEBRUARY = get_next_period(JANUARY)


def run(coro):
    return asyncio.run(coro)


class FailingLogWriteStore(InMemoryKeyValueStore):
    """In-memory store whose payment log writes can be made to fail."""

    fail_log_writes = False

    async def set(self, key, value):
        if self.fail_log_writes and key == PAYMENT_LOGS_KEY:
            raise StorageError("disk full")
        await super().set(key, value)


def _one_time(name="Dentist", amount=80, day=20, period=JANUARY, **extra):
    return {
        "name": name,
        "amount": amount,
        "due_date": datetime(period.period_start.year, period.period_start.month, day),
        "day_of_month": day,
        "period_start": period.period_start,
        "period_end": period.period_end,
        **extra,
    }


class TestRecurringPaymentService:
    """Tests for the template store."""

    def test_create_assigns_id_and_timestamp(self, recurring_service, clock):
        """Test ids and created_at are assigned by the store."""
        payment = run(recurring_service.create({
            "id": "chosen-by-caller",
            "name": "Rent",
            "defaultAmount": 1200,
            "dayOfMonth": 1,
        }))
        assert payment.id != "chosen-by-caller"
        assert payment.created_at == clock.now
        assert payment.is_active is True
        assert run(recurring_service.get_by_id(payment.id)) == payment

    def test_stored_in_camel_case(self, recurring_service, store):
        """Test the stored collection keeps camelCase keys."""
        run(recurring_service.create({"name": "Rent", "default_amount": 1200, "day_of_month": 1}))
        stored = store.snapshot()[RECURRING_PAYMENTS_KEY]
        assert stored[0]["defaultAmount"] == 1200
        assert stored[0]["dayOfMonth"] == 1

    def test_sorted_reads_only_active(self, recurring_service):
        """Test sorted reads skip inactive templates."""
        gym = run(recurring_service.create({"name": "Gym", "day_of_month": 15}))
        run(recurring_service.create({"name": "Rent", "day_of_month": 1}))
        run(recurring_service.create({
            "name": "Salary", "day_of_month": 25, "type": PaymentType.INCOME,
        }))
        run(recurring_service.delete(gym.id))

        names = [p.name for p in run(recurring_service.get_all_sorted_by_day())]
        assert names == ["Rent", "Salary"]
        income = run(recurring_service.get_by_type(PaymentType.INCOME))
        assert [p.name for p in income] == ["Salary"]
        assert [p.name for p in run(recurring_service.get_by_type("expense"))] == ["Rent"]

    def test_delete_is_soft(self, recurring_service):
        """Test deleting keeps the template, inactive."""
        payment = run(recurring_service.create({"name": "Rent", "day_of_month": 1}))
        run(recurring_service.delete(payment.id))
        kept = run(recurring_service.get_by_id(payment.id))
        assert kept is not None
        assert kept.is_active is False

    def test_permanent_delete(self, recurring_service):
        """Test permanent delete removes the template."""
        payment = run(recurring_service.create({"name": "Rent", "day_of_month": 1}))
        run(recurring_service.permanent_delete(payment.id))
        assert run(recurring_service.get_all()) == []

    def test_update(self, recurring_service):
        """Test updates change only the given fields."""
        payment = run(recurring_service.create({
            "name": "Rent", "day_of_month": 1, "default_amount": 1200,
        }))
        updated = run(recurring_service.update(payment.id, {"defaultAmount": 1250.5}))
        assert updated.default_amount == Decimal("1250.5")
        assert updated.name == "Rent"
        assert updated.created_at == payment.created_at

    def test_update_unknown_id(self, recurring_service, store):
        """Test unknown ids are ignored and nothing is written."""
        assert run(recurring_service.update("missing", {"name": "X"})) is None
        assert RECURRING_PAYMENTS_KEY not in store.snapshot()

    def test_subscribers_see_every_write(self, recurring_service):
        """Test each write publishes the full collection."""
        seen = []
        unsubscribe = recurring_service.subscribe(lambda payments: seen.append(len(payments)))
        run(recurring_service.create({"name": "Rent", "day_of_month": 1}))
        run(recurring_service.create({"name": "Gym", "day_of_month": 2}))
        unsubscribe()
        run(recurring_service.create({"name": "Phone", "day_of_month": 3}))
        assert seen == [1, 2]

    def test_corrupt_collection_raises(self, clock):
        """Test a non-list collection is reported, not ignored."""
        store = InMemoryKeyValueStore({RECURRING_PAYMENTS_KEY: {"not": "a list"}})
        service = RecurringPaymentService(store, clock=clock)
        with pytest.raises(StorageError):
            run(service.get_all())


class TestPaymentLogMaterialization:
    """Tests for ensure_logs_for_period."""

    def _payments(self, recurring_service):
        run(recurring_service.create({"name": "Rent", "day_of_month": 1, "default_amount": 1200}))
        run(recurring_service.create({
            "name": "Salary", "day_of_month": 25, "default_amount": 3000, "type": "income",
        }))
        return run(recurring_service.get_all_sorted_by_day())

    def test_creates_logs(self, recurring_service, log_service, clock):
        """Test every active template gets a log in the period."""
        payments = self._payments(recurring_service)
        created = run(log_service.ensure_logs_for_period(JANUARY, payments))
        assert len(created) == 2
        logs = run(log_service.get_logs_by_period(JANUARY))
        assert [log.name for log in logs] == ["Rent", "Salary"]
        assert logs[0].amount == Decimal("1200")
        assert logs[0].due_date == datetime(2024, 1, 1)
        assert all(log.created_at == clock.now for log in logs)

    def test_idempotent(self, recurring_service, log_service, store):
        """Test calling twice never adds logs after the first call."""
        payments = self._payments(recurring_service)
        run(log_service.ensure_logs_for_period(JANUARY, payments))
        before = store.snapshot()[PAYMENT_LOGS_KEY]
        assert run(log_service.ensure_logs_for_period(JANUARY, payments)) == []
        assert store.snapshot()[PAYMENT_LOGS_KEY] == before

    def test_inactive_payments_skipped(self, recurring_service, log_service):
        """Test deactivated templates are not materialized."""
        payments = self._payments(recurring_service)
        run(recurring_service.delete(payments[0].id))
        everything = run(recurring_service.get_all())
        run(log_service.ensure_logs_for_period(JANUARY, everything))
        assert [log.name for log in run(log_service.get_all())] == ["Salary"]

    def test_each_period_separately(self, recurring_service, log_service):
        """Test a new period gets its own logs."""
        payments = self._payments(recurring_service)
        run(log_service.ensure_logs_for_period(JANUARY, payments))
        run(log_service.ensure_logs_for_period(FEBRUARY, payments))
        assert len(run(log_service.get_logs_by_period(FEBRUARY))) == 2
        assert len(run(log_service.get_all())) == 4

    def test_deleted_log_not_recreated(self, recurring_service, log_service, store):
        """Test a deleted recurring log stays deleted for that period."""
        payments = self._payments(recurring_service)
        run(log_service.ensure_logs_for_period(JANUARY, payments))
        rent = run(log_service.get_logs_by_period(JANUARY))[0]

        run(log_service.delete(rent.id))
        assert run(log_service.ensure_logs_for_period(JANUARY, payments)) == []
        assert store.snapshot()[PAYMENT_LOG_EXCLUSIONS_KEY] == [
            {"recurringPaymentId": rent.recurring_payment_id, "periodKey": "2024-01-01"}
        ]
        # Other periods are unaffected
        assert len(run(log_service.ensure_logs_for_period(FEBRUARY, payments))) == 2

    def test_restore_to_period(self, recurring_service, log_service):
        """Test a removed payment can be brought back into its period."""
        payments = self._payments(recurring_service)
        run(log_service.ensure_logs_for_period(JANUARY, payments))
        rent = run(log_service.get_logs_by_period(JANUARY))[0]
        run(log_service.delete(rent.id))

        run(log_service.restore_to_period(rent.recurring_payment_id, JANUARY))
        created = run(log_service.ensure_logs_for_period(JANUARY, payments))
        assert [log.name for log in created] == ["Rent"]

    def test_delete_without_exclusion(self, recurring_service, log_service):
        """Test exclude=False lets the next pass recreate the log."""
        payments = self._payments(recurring_service)
        run(log_service.ensure_logs_for_period(JANUARY, payments))
        rent = run(log_service.get_logs_by_period(JANUARY))[0]
        run(log_service.delete(rent.id, exclude=False))
        assert len(run(log_service.ensure_logs_for_period(JANUARY, payments))) == 1


class TestPaymentLogLifecycle:
    """Tests for one-time logs, completion and edits."""

    def test_create_one_time(self, log_service, clock):
        """Test a one-time log is stored without a template reference."""
        log = run(log_service.create(_one_time()))
        assert log.is_one_time
        assert log.created_at == clock.now
        assert run(log_service.get_by_id(log.id)).name == "Dentist"

    def test_create_multiple(self, log_service, store):
        """Test several logs are stored at once."""
        created = run(log_service.create_multiple([_one_time("A"), _one_time("B", day=3)]))
        assert len(created) == 2
        assert len(store.snapshot()[PAYMENT_LOGS_KEY]) == 2
        assert run(log_service.create_multiple([])) == []

    def test_logs_by_period_sorted_by_due_date(self, log_service):
        """Test period reads filter by period and sort by due date."""
        run(log_service.create(_one_time("Late", day=28)))
        run(log_service.create(_one_time("Early", day=2)))
        run(log_service.create(_one_time("Other period", day=5, period=FEBRUARY)))
        names = [log.name for log in run(log_service.get_logs_by_period(JANUARY))]
        assert names == ["Early", "Late"]

    def test_mark_completed_and_incomplete(self, log_service, clock):
        """Test completion stamps and clears the completion date."""
        log = run(log_service.create(_one_time()))
        clock.now = datetime(2024, 1, 21, 12, 0)

        done = run(log_service.mark_as_completed(log.id))
        assert done.is_completed is True
        assert done.completed_date == datetime(2024, 1, 21, 12, 0)

        undone = run(log_service.mark_as_incomplete(log.id))
        assert undone.is_completed is False
        assert undone.completed_date is None

    def test_completion_round_trips_through_storage(self, log_service):
        """Test completed_date survives a reload."""
        log = run(log_service.create(_one_time()))
        run(log_service.mark_as_completed(log.id))
        assert run(log_service.get_by_id(log.id)).completed_date is not None

    def test_update_amount(self, log_service):
        """Test amount edits."""
        log = run(log_service.create(_one_time()))
        updated = run(log_service.update_log_amount(log.id, 95.5))
        assert updated.amount == Decimal("95.5")
        assert run(log_service.get_by_id(log.id)).amount == Decimal("95.5")

    def test_unknown_ids_ignored(self, log_service, store):
        """Test mutating an unknown id does nothing."""
        assert run(log_service.mark_as_completed("missing")) is None
        assert run(log_service.update_log_amount("missing", 10)) is None
        run(log_service.delete("missing"))
        assert PAYMENT_LOGS_KEY not in store.snapshot()

    def test_delete_one_time_leaves_no_marker(self, log_service, store):
        """Test one-time deletions record nothing."""
        log = run(log_service.create(_one_time()))
        run(log_service.delete(log.id))
        assert run(log_service.get_all()) == []
        assert PAYMENT_LOG_EXCLUSIONS_KEY not in store.snapshot()

    def test_failed_delete_leaves_no_marker(self, clock):
        """Test no deletion marker is kept when removing the log fails."""
        store = FailingLogWriteStore()
        recurring = RecurringPaymentService(store, clock=clock)
        logs = PaymentLogService(store, clock=clock)
        run(recurring.create({"name": "Rent", "day_of_month": 1}))
        run(logs.ensure_logs_for_period(JANUARY, run(recurring.get_all())))
        rent = run(logs.get_all())[0]

        store.fail_log_writes = True
        with pytest.raises(StorageError):
            run(logs.delete(rent.id))
        assert run(logs.get_exclusions()) == []
        assert [log.id for log in run(logs.get_all())] == [rent.id]

    def test_reads_stored_records(self, clock):
        """Test logs written with 'Z' timestamps and plain numbers load."""
        store = InMemoryKeyValueStore({PAYMENT_LOGS_KEY: [{
            "id": "log-1",
            "recurringPaymentId": "rp-1",
            "name": "Rent",
            "amount": 1200,
            "dueDate": "2024-01-01T00:00:00.000",
            "isCompleted": False,
            "iconName": "home",
            "dayOfMonth": 1,
            "type": "expense",
            "periodStart": "2024-01-01T00:00:00.000",
            "periodEnd": "2024-01-31T23:59:59.999",
            "createdAt": "2023-12-31T10:00:00.000",
        }]})
        service = PaymentLogService(store, clock=clock)
        logs = run(service.get_logs_by_period(JANUARY))
        assert [log.id for log in logs] == ["log-1"]
        assert logs[0].amount == Decimal("1200")

    def test_forecast_passthrough(self, log_service):
        """Test the store exposes the forecast calculation."""
        log = run(log_service.create(_one_time(amount=300)))
        forecast = PaymentLogService.calculate_forecast(1000, [log])
        assert forecast.forecasted_balance == Decimal("700")


class TestBalanceService:
    """Tests for per-period balances."""

    def test_defaults_to_zero(self, balance_service):
        """Test a period without a balance reads as zero."""
        assert run(balance_service.get_balance_for_period(JANUARY)) == Decimal("0")

    def test_set_and_get(self, balance_service):
        """Test balances are kept per period."""
        run(balance_service.set_balance_for_period(JANUARY, 1500))
        run(balance_service.set_balance_for_period(FEBRUARY, Decimal("-42.10")))
        assert run(balance_service.get_balance_for_period(JANUARY)) == Decimal("1500")
        assert run(balance_service.get_balance_for_period(FEBRUARY)) == Decimal("-42.10")

    def test_set_replaces(self, balance_service, store):
        """Test setting twice keeps one entry."""
        run(balance_service.set_balance_for_period(JANUARY, 1500))
        run(balance_service.set_balance_for_period(JANUARY, 900))
        assert store.snapshot()[PERIOD_BALANCES_KEY] == [
            {"periodKey": "2024-01-01", "currentAccountBalance": 900}
        ]
        assert run(balance_service.get_balances()) == {"2024-01-01": Decimal("900")}
