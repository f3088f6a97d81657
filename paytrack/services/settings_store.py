"""
Settings Store

Persists the user's AppSettings under a single key. Whatever is stored,
even a partial object from an older version, is merged over the defaults
on read. Month start day changes are validated before anything is
written.
"""

from typing import Any, Callable, Optional, Union

import structlog
from pydantic import ValidationError

from paytrack.models.preferences import DEFAULT_APP_SETTINGS, AppSettings, Language
from paytrack.services.notify import ChangeNotifier
from paytrack.services.storage.interface import KeyValueStore, StorageError


APP_SETTINGS_KEY = "app_settings"

logger = structlog.get_logger(__name__)


class SettingsValidationError(ValueError):
    """A settings change was rejected; nothing was written."""
    pass


class SettingsService:
    """Read and update the user's preferences."""

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._notifier: ChangeNotifier[AppSettings] = ChangeNotifier(APP_SETTINGS_KEY)

    def subscribe(self, listener: Callable[[AppSettings], object]) -> Callable[[], None]:
        """Be told about the new settings after every write."""
        return self._notifier.subscribe(listener)

    async def get(self) -> AppSettings:
        """Stored settings merged over the defaults."""
        stored = await self._store.get(APP_SETTINGS_KEY)
        if stored is None:
            return DEFAULT_APP_SETTINGS.model_copy()
        if not isinstance(stored, dict):
            raise StorageError(f"'{APP_SETTINGS_KEY}' is not an object")
        # Shallow merge: keys present in storage win, missing ones use defaults
        merged = {**DEFAULT_APP_SETTINGS.to_storage(), **stored}
        return AppSettings.model_validate(merged)

    async def get_month_start_day(self) -> int:
        return (await self.get()).month_start_day

    async def update(self, changes: Optional[dict[str, Any]] = None, **kwargs: Any) -> AppSettings:
        """
        Merge changes into the stored settings.

        Accepts a dict (snake_case or camelCase keys) and/or keyword args.

        Raises:
            SettingsValidationError: If the result is not valid settings
        """
        patch = AppSettings.normalize_keys({**(changes or {}), **kwargs})
        current = (await self.get()).model_dump()
        current.update(patch)
        try:
            settings = AppSettings.model_validate(current)
        except ValidationError as e:
            logger.warning("settings_rejected", fields=sorted(patch), error=str(e))
            raise SettingsValidationError(f"Invalid settings: {e}") from e

        await self._store.set(APP_SETTINGS_KEY, settings.to_storage())
        await self._notifier.publish(settings)
        logger.info("settings_updated", fields=sorted(patch))
        return settings

    async def set_month_start_day(self, day: int) -> AppSettings:
        """
        Change the month start day.

        Raises:
            SettingsValidationError: If day is outside 1-31 (nothing is written)
        """
        if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= 31:
            logger.warning("month_start_day_rejected", day=day)
            raise SettingsValidationError("Month start day must be between 1 and 31")
        return await self.update(month_start_day=day)

    async def set_currency(self, currency: str, currency_symbol: str) -> AppSettings:
        return await self.update(currency=currency, currency_symbol=currency_symbol)

    async def set_language(self, language: Union[Language, str]) -> AppSettings:
        try:
            language = Language(language)
        except ValueError as e:
            raise SettingsValidationError(f"Unsupported language: {language}") from e
        return await self.update(language=language)
