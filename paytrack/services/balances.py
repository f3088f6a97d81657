"""
Balance Store

One account balance per period, keyed by period key. Setting a balance
replaces the entry for that period and leaves every other period alone.
"""

from decimal import Decimal
from typing import Union

from paytrack.models.balance import PeriodBalance
from paytrack.models.base import to_decimal
from paytrack.models.period import MonthPeriod
from paytrack.periods.calculator import get_period_key
from paytrack.services.collection import CollectionService


PERIOD_BALANCES_KEY = "period_balances"


class BalanceService(CollectionService[PeriodBalance]):
    """Per-period account balances."""

    key = PERIOD_BALANCES_KEY
    model = PeriodBalance

    async def get_all(self) -> list[PeriodBalance]:
        return await self._load()

    async def get_balances(self) -> dict[str, Decimal]:
        """Mapping of period key to balance."""
        return {
            entry.period_key: entry.current_account_balance
            for entry in await self._load()
        }

    async def get_balance_for_period(self, period: MonthPeriod) -> Decimal:
        """Balance entered for a period, or zero if none was entered."""
        key = get_period_key(period)
        for entry in await self._load():
            if entry.period_key == key:
                return entry.current_account_balance
        return Decimal("0")

    async def set_balance_for_period(
        self,
        period: MonthPeriod,
        amount: Union[Decimal, int, float],
    ) -> PeriodBalance:
        """Insert or replace the balance for a period."""
        entry = PeriodBalance(
            period_key=get_period_key(period),
            current_account_balance=to_decimal(amount),
        )

        balances = await self._load()
        for idx, existing in enumerate(balances):
            if existing.period_key == entry.period_key:
                balances[idx] = entry
                break
        else:
            balances.append(entry)

        await self._save(balances)
        self._logger.info("period_balance_set", period_key=entry.period_key)
        return entry
