"""Session configuration models.

The set of tracked series, retry policy and normalization bounds are static for
the lifetime of one client session. They are bundled in ``AcquisitionConfig``
and handed to the coordinator at construction.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, model_validator

from tidewatch.domain.models.base import ValueObject


class SeriesRole(str, Enum):
    """What a series contributes to the regime score."""

    LIQUIDITY = "liquidity"
    OUTPUT = "output"
    PRICE_LEVEL = "price_level"
    PRODUCTIVITY = "productivity"
    LONG_RATE = "long_rate"
    POLICY_RATE = "policy_rate"


class SeriesSpec(ValueObject):
    """One tracked upstream series."""

    series_id: str = Field(..., description="Stable key used for store, status and cache")
    provider_series_id: str = Field(..., description="Identifier understood by the upstream")
    role: SeriesRole | None = Field(default=None, description="Scoring role, None if display only")
    label: str = Field(default="", description="Human readable name")
    params: dict[str, str] = Field(default_factory=dict, description="Extra request parameters")


class Bounds(ValueObject):
    low: float
    high: float

    @model_validator(mode="after")
    def _check_order(self) -> Bounds:
        if self.high <= self.low:
            raise ValueError(f"high ({self.high}) must be greater than low ({self.low})")
        return self


class ScoringBounds(ValueObject):
    """Normalization ranges (in percent) for each sub-score input."""

    liquidity_yoy: Bounds = Bounds(low=-5.0, high=10.0)
    inverse_real_rate: Bounds = Bounds(low=-3.0, high=3.0)
    real_growth: Bounds = Bounds(low=-5.0, high=5.0)
    inverse_policy_gap: Bounds = Bounds(low=-5.0, high=5.0)
    productivity_yoy: Bounds = Bounds(low=-2.0, high=4.0)


DEFAULT_OBSERVATION_START = "2010-01-01"

SPOT_SERIES_ID = "BTC_USD"

DEFAULT_SERIES: tuple[SeriesSpec, ...] = (
    SeriesSpec(
        series_id="M2SL", provider_series_id="M2SL", role=SeriesRole.LIQUIDITY, label="M2 money stock"
    ),
    SeriesSpec(
        series_id="GDPC1", provider_series_id="GDPC1", role=SeriesRole.OUTPUT, label="Real GDP"
    ),
    SeriesSpec(
        series_id="CPIAUCSL",
        provider_series_id="CPIAUCSL",
        role=SeriesRole.PRICE_LEVEL,
        label="Consumer price index",
    ),
    SeriesSpec(
        series_id="OPHNFB",
        provider_series_id="OPHNFB",
        role=SeriesRole.PRODUCTIVITY,
        label="Nonfarm productivity",
    ),
    SeriesSpec(
        series_id="DGS10",
        provider_series_id="DGS10",
        role=SeriesRole.LONG_RATE,
        label="10-year Treasury yield",
    ),
    SeriesSpec(
        series_id="FEDFUNDS",
        provider_series_id="FEDFUNDS",
        role=SeriesRole.POLICY_RATE,
        label="Effective fed funds rate",
    ),
)


class AcquisitionConfig(ValueObject):
    """Everything the coordinator and scorer need for one session."""

    series: tuple[SeriesSpec, ...] = Field(default=DEFAULT_SERIES)
    spot_series_id: str = Field(default=SPOT_SERIES_ID, description="Pseudo-series for spot price")
    retry_delay_seconds: float = Field(default=30.0, ge=0.0)
    retry_ceiling: int = Field(default=3, ge=0)
    trend_window: int = Field(default=12, ge=1)
    observation_start: str | None = Field(default=DEFAULT_OBSERVATION_START)
    bounds: ScoringBounds = Field(default_factory=ScoringBounds)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> AcquisitionConfig:
        ids = [spec.series_id for spec in self.series]
        if len(set(ids)) != len(ids):
            raise ValueError("series ids must be unique")
        if self.spot_series_id in ids:
            raise ValueError(f"spot series id {self.spot_series_id!r} collides with a series id")
        return self

    @property
    def series_ids(self) -> tuple[str, ...]:
        """All tracked ids, spot pseudo-series last."""
        return tuple(spec.series_id for spec in self.series) + (self.spot_series_id,)

    def get_spec(self, series_id: str) -> SeriesSpec | None:
        for spec in self.series:
            if spec.series_id == series_id:
                return spec
        return None

    def series_for_role(self, role: SeriesRole) -> str | None:
        for spec in self.series:
            if spec.role is role:
                return spec.series_id
        return None

    def request_params(self, spec: SeriesSpec) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.observation_start:
            params["observation_start"] = self.observation_start
        params.update(spec.params)
        return params
