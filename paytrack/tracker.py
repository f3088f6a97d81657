"""
Tracker and Settings Flows

This module ties the stores and calculators together into what the
tracker and settings screens do:

1. Tracker: settings -> current period -> ensure logs -> load logs and
   balance -> forecast -> grouped lists, plus the user actions on them
2. Settings: validate the user's choice, then persist it

DESIGN DECISION: Flows hold screen state but no rules of their own.
Period math and forecasting stay in pure functions; flows only decide
what to reload after each action. Invalid input is reported back and
never reaches a store.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, Optional

import structlog

from paytrack.config import get_settings
from paytrack.engine.forecast import calculate_forecast, forecast_status
from paytrack.engine.grouping import group_logs
from paytrack.log import configure_logging
from paytrack.models.payment import (
    ForecastData,
    ForecastStatus,
    GroupedLogs,
    PaymentLog,
    PaymentType,
)
from paytrack.models.period import MonthPeriod
from paytrack.models.preferences import AppSettings
from paytrack.models.validation import InputResult, ValidationIssue
from paytrack.periods.calculator import (
    get_current_period,
    get_next_period,
    get_previous_period,
    period_contains,
)
from paytrack.services.balances import BalanceService
from paytrack.services.payment_logs import PaymentLogService
from paytrack.services.recurring_payments import RecurringPaymentService
from paytrack.services.settings_store import SettingsService
from paytrack.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    ensure_schema_version,
)
from paytrack.validation import InputValidator


logger = structlog.get_logger(__name__)


class PaymentTrackerFlow:
    """
    State and actions of the payment tracker screen.

    Call initialize() first; every action refreshes exactly the state it
    can have changed.
    """

    def __init__(
        self,
        settings_service: SettingsService,
        recurring_payments: RecurringPaymentService,
        payment_logs: PaymentLogService,
        balances: BalanceService,
        validator: Optional[InputValidator] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._settings = settings_service
        self._recurring = recurring_payments
        self._logs = payment_logs
        self._balances = balances
        self._validator = validator or InputValidator()
        self._clock = clock

        self.period: Optional[MonthPeriod] = None
        self.logs: list[PaymentLog] = []
        self.grouped: GroupedLogs = GroupedLogs()
        self.current_balance: Decimal = Decimal("0")
        self.currency_symbol: str = "$"
        self.forecast: ForecastData = ForecastData()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def initialize(self) -> None:
        """Load everything for the period containing today."""
        settings = await self._settings.get()
        self.currency_symbol = settings.currency_symbol
        self.period = get_current_period(settings.month_start_day, self._clock())
        await self._load_period()

    async def _load_period(self) -> None:
        await self._ensure_logs()
        await self._load_logs()
        self.current_balance = await self._balances.get_balance_for_period(self._require_period())
        self._recalculate()

    async def _ensure_logs(self) -> None:
        payments = await self._recurring.get_all_sorted_by_day()
        await self._logs.ensure_logs_for_period(self._require_period(), payments)

    async def _load_logs(self) -> None:
        self.logs = await self._logs.get_logs_by_period(self._require_period())
        self.grouped = group_logs(self.logs, today=self._clock().date())

    def _recalculate(self) -> None:
        self.forecast = calculate_forecast(self.current_balance, self.logs)

    def _require_period(self) -> MonthPeriod:
        if self.period is None:
            raise RuntimeError("PaymentTrackerFlow.initialize() has not been called")
        return self.period

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def previous_period(self) -> MonthPeriod:
        self.period = get_previous_period(self._require_period())
        await self._load_period()
        return self.period

    async def next_period(self) -> MonthPeriod:
        self.period = get_next_period(self._require_period())
        await self._load_period()
        return self.period

    def is_current_period(self) -> bool:
        """Whether the shown period contains now."""
        return period_contains(self._require_period(), self._clock())

    def forecast_status(self) -> ForecastStatus:
        return forecast_status(self.forecast)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def toggle_completed(self, log_id: str) -> None:
        log = next((log for log in self.logs if log.id == log_id), None)
        if log is None:
            log = await self._logs.get_by_id(log_id)
        if log is None:
            return

        if log.is_completed:
            await self._logs.mark_as_incomplete(log_id)
        else:
            await self._logs.mark_as_completed(log_id)
        await self._load_logs()
        self._recalculate()

    async def edit_amount(self, log_id: str, raw_amount: Any) -> InputResult:
        """Change a log's amount; invalid input changes nothing."""
        result = self._validator.parse_amount(raw_amount)
        if not result.is_valid:
            logger.info("amount_edit_rejected", log_id=log_id, issues=result.messages)
            return result
        await self._logs.update_log_amount(log_id, result.value)
        await self._load_logs()
        self._recalculate()
        return result

    async def delete_log(self, log_id: str) -> None:
        await self._logs.delete(log_id)
        await self._load_logs()
        self._recalculate()

    async def change_balance(self, raw_balance: Any) -> InputResult:
        """Record the account balance for the shown period."""
        result = self._validator.parse_balance(raw_balance)
        if not result.is_valid:
            logger.info("balance_edit_rejected", issues=result.messages)
            return result
        await self._balances.set_balance_for_period(self._require_period(), result.value)
        self.current_balance = result.value
        self._recalculate()
        return result

    async def add_one_time_payment(
        self,
        name: str,
        raw_amount: Any,
        due: date,
        payment_type: PaymentType = PaymentType.EXPENSE,
        icon_name: str = "cash",
        is_completed: bool = False,
    ) -> InputResult:
        """
        Add a payment that belongs only to the shown period.

        The due date is stored as given and must fall inside the period.
        """
        result = self._validator.parse_amount(raw_amount)
        if not result.is_valid:
            return result

        period = self._require_period()
        due_date = datetime.combine(due, time.min)
        if not period_contains(period, due_date):
            logger.info("one_time_payment_rejected", due=due.isoformat())
            return InputResult(issues=[ValidationIssue(
                field="due_date",
                issue_type="out_of_range",
                message=f"Due date must fall within {period.display_label}",
            )])

        await self._logs.create({
            "recurring_payment_id": None,
            "name": name,
            "amount": result.value,
            "due_date": due_date,
            "is_completed": is_completed,
            "completed_date": self._clock() if is_completed else None,
            "icon_name": icon_name,
            "day_of_month": due_date.day,
            "type": PaymentType(payment_type),
            "period_start": period.period_start,
            "period_end": period.period_end,
        })
        await self._load_logs()
        self._recalculate()
        return result


class SettingsFlow:
    """Validate-then-save actions of the settings screen."""

    def __init__(
        self,
        settings_service: SettingsService,
        validator: Optional[InputValidator] = None,
    ):
        self._settings = settings_service
        self._validator = validator or InputValidator()
        self.settings: AppSettings = AppSettings()

    async def load(self) -> AppSettings:
        self.settings = await self._settings.get()
        return self.settings

    async def change_month_start_day(self, raw_day: Any) -> InputResult:
        result = self._validator.parse_month_start_day(raw_day)
        if result.is_valid:
            self.settings = await self._settings.set_month_start_day(result.value)
        return result

    async def change_currency(self, code: Optional[str], symbol: Optional[str]) -> InputResult:
        result = self._validator.parse_currency(code, symbol)
        if result.is_valid:
            self.settings = await self._settings.set_currency(*result.value)
        return result

    async def change_language(self, raw_language: Any) -> InputResult:
        result = self._validator.parse_language(raw_language)
        if result.is_valid:
            self.settings = await self._settings.set_language(result.value)
        return result


def create_store(backend: Optional[str] = None) -> KeyValueStore:
    """Build the configured key-value store."""
    storage = get_settings().storage
    backend = backend or storage.backend
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "json":
        return JsonFileKeyValueStore(storage.path)
    raise ValueError(f"Unknown storage backend: {backend}")


async def create_app_components(
    store: Optional[KeyValueStore] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> tuple[PaymentTrackerFlow, SettingsFlow]:
    """
    Factory function to create all application components.

    Args:
        store: Key-value store to use; built from configuration if None
        clock: Source of "now" for every component

    Returns:
        (tracker_flow, settings_flow)

    Raises:
        SchemaVersionError: If the store was written by a newer version
    """
    configure_logging()
    store = store or create_store()
    version = await ensure_schema_version(store)
    logger.info("store_opened", store=type(store).__name__, schema_version=version)

    settings_service = SettingsService(store)
    validator = InputValidator()

    tracker = PaymentTrackerFlow(
        settings_service=settings_service,
        recurring_payments=RecurringPaymentService(store, clock=clock),
        payment_logs=PaymentLogService(store, clock=clock),
        balances=BalanceService(store),
        validator=validator,
        clock=clock,
    )
    settings_flow = SettingsFlow(settings_service, validator=validator)
    return tracker, settings_flow
