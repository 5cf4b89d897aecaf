"""Macroeconomic and spot-price domain models."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import Field, field_validator

from tidewatch.domain.models.base import ValueObject


class Observation(ValueObject):
    """Value object representing one timestamped point of a series.

    ``value`` is ``None`` when the upstream reported a missing observation
    (FRED uses ``"."``) or something that is not a finite number.
    """

    timestamp: str = Field(..., description="Observation date identifier (e.g., 2024-01-01)")
    value: Decimal | None = Field(default=None, description="Observation value, None if missing")

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, raw: Any) -> Decimal | None:
        if raw is None or isinstance(raw, bool):
            return None
        if isinstance(raw, Decimal):
            return raw if raw.is_finite() else None
        text = str(raw).strip()
        if not text or text == ".":
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
        return value if value.is_finite() else None

    @property
    def is_valid(self) -> bool:
        return self.value is not None


class SpotPriceSnapshot(ValueObject):
    """Spot price together with the moment it was captured."""

    price: float = Field(..., description="Spot price in USD")
    captured_at: datetime = Field(..., description="When the price was fetched")
