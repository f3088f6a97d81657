"""
User Preferences

AppSettings is the single preferences record the user edits on the
settings screen. It is distinct from paytrack.config, which holds the
runtime configuration read from the environment.
"""

from enum import Enum

from pydantic import Field

from paytrack.models.base import RecordModel


class Language(str, Enum):
    """Supported interface languages."""
    EN = "en"
    NL = "nl"
    DE = "de"
    FR = "fr"
    ES = "es"
    ZH = "zh"


class AppSettings(RecordModel):
    """
    User preferences.

    Missing fields in a stored record fall back to these defaults.
    """

    month_start_day: int = Field(
        default=1,
        ge=1,
        le=31,
        description="Day of the month a period starts (e.g. payday)"
    )
    currency: str = Field(
        default="USD",
        min_length=1,
        max_length=10,
        description="Currency code"
    )
    currency_symbol: str = Field(
        default="$",
        min_length=1,
        max_length=10,
        description="Symbol shown next to amounts"
    )
    language: Language = Field(default=Language.EN)


DEFAULT_APP_SETTINGS = AppSettings()
