"""Shared fixtures: an in-memory store, services over it and a fixed clock."""

from datetime import datetime

import pytest

from paytrack.services import (
    BalanceService,
    InMemoryKeyValueStore,
    PaymentLogService,
    RecurringPaymentService,
    SettingsService,
)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 10, 9, 30))


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def recurring_service(store, clock):
    return RecurringPaymentService(store, clock=clock)


@pytest.fixture
def log_service(store, clock):
    return PaymentLogService(store, clock=clock)


@pytest.fixture
def balance_service(store):
    return BalanceService(store)


@pytest.fixture
def settings_service(store):
    return SettingsService(store)
