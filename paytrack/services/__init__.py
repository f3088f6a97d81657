"""Services package."""

from paytrack.services.balances import PERIOD_BALANCES_KEY, BalanceService
from paytrack.services.notify import ChangeNotifier
from paytrack.services.payment_logs import (
    PAYMENT_LOG_EXCLUSIONS_KEY,
    PAYMENT_LOGS_KEY,
    PaymentLogService,
)
from paytrack.services.recurring_payments import (
    RECURRING_PAYMENTS_KEY,
    RecurringPaymentService,
)
from paytrack.services.settings_store import (
    APP_SETTINGS_KEY,
    SettingsService,
    SettingsValidationError,
)
from paytrack.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    SchemaVersionError,
    StorageError,
    ensure_schema_version,
)

__all__ = [
    # Stores
    "BalanceService",
    "PaymentLogService",
    "RecurringPaymentService",
    "SettingsService",
    "ChangeNotifier",
    # Collection keys
    "APP_SETTINGS_KEY",
    "PAYMENT_LOGS_KEY",
    "PAYMENT_LOG_EXCLUSIONS_KEY",
    "PERIOD_BALANCES_KEY",
    "RECURRING_PAYMENTS_KEY",
    # Storage
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "ensure_schema_version",
    # Exceptions
    "SchemaVersionError",
    "SettingsValidationError",
    "StorageError",
]
