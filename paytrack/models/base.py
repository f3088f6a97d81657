"""
Shared building blocks for the record models.

Records are persisted with camelCase keys so stored collections keep the
shape the mobile app wrote; Python code uses snake_case attributes.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
)
from pydantic.alias_generators import to_camel


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert a number to Decimal without picking up binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def _money_to_json(value: Decimal) -> Union[int, float]:
    # Whole amounts stay integers so stored values read back as 1000, not 1000.0
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


# Amounts are Decimal in memory and plain JSON numbers in storage
Money = Annotated[
    Decimal,
    BeforeValidator(lambda v: to_decimal(v) if isinstance(v, float) else v),
    PlainSerializer(_money_to_json, return_type=Union[int, float], when_used="json"),
]

# Periods are local calendar periods, so instants are kept naive local time
LocalDateTime = Annotated[datetime, AfterValidator(_to_local_naive)]


class RecordModel(BaseModel):
    """Base for every persisted record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @classmethod
    def normalize_keys(cls, data: dict) -> dict:
        """Map camelCase keys in a partial update to attribute names."""
        by_alias = {
            field.alias: name
            for name, field in cls.model_fields.items()
            if field.alias
        }
        return {by_alias.get(key, key): value for key, value in data.items()}

    def to_storage(self) -> dict:
        """Serialize to the JSON-compatible shape kept in the key-value store."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
