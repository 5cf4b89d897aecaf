"""Regime scoring and feed state models."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from tidewatch.domain.models.base import ValueObject
from tidewatch.domain.models.fetch_results import FetchStatus
from tidewatch.domain.models.macro import Observation, SpotPriceSnapshot


class Regime(str, Enum):
    RISK_ON = "Risk-On"
    NEUTRAL = "Neutral"
    RISK_OFF = "Risk-Off"


class Current(str, Enum):
    """Quadrant of the tides/waves plane."""

    RISING = "Rising"
    RISING_FADING = "Rising/Fading"
    REBOUND = "Rebound"
    EBB = "Ebb"


class FeedHealth(str, Enum):
    UNKNOWN = "Unknown"
    STABLE = "Stable"
    DEGRADED = "Degraded"
    OUTAGE = "Outage"


class RegimeScores(ValueObject):
    """Normalized sub-scores and their classification."""

    tides: float = Field(..., description="Liquidity sub-score in [0, 1]")
    waves: float = Field(..., description="Cyclical sub-score in [0, 1]")
    seafloor: float = Field(..., description="Structural sub-score in [0, 1]")
    composite: float = Field(..., description="Weighted composite, two decimals")
    regime: Regime
    current: Current


class DerivedMetrics(ValueObject):
    """Everything derived from the series store and spot price."""

    liquidity_yoy: float | None = None
    liquidity_3m_change: float | None = None
    output_yoy: float | None = None
    price_level_yoy: float | None = None
    productivity_yoy: float | None = None
    long_rate: float | None = None
    policy_rate: float | None = None
    real_rate: float = 0.0
    policy_gap: float = 0.0
    real_growth: float = 0.0
    spot_price: float | None = None
    scores: RegimeScores
    outlook: str = ""
    trends: dict[str, list[float] | None] = Field(default_factory=dict)

    @property
    def tides(self) -> float:
        return self.scores.tides

    @property
    def waves(self) -> float:
        return self.scores.waves

    @property
    def seafloor(self) -> float:
        return self.scores.seafloor

    @property
    def composite(self) -> float:
        return self.scores.composite

    @property
    def regime(self) -> Regime:
        return self.scores.regime

    @property
    def current(self) -> Current:
        return self.scores.current


class FeedSnapshot(ValueObject):
    """Read-only view of the coordinator state handed to consumers."""

    series: dict[str, list[Observation]] = Field(default_factory=dict)
    statuses: dict[str, FetchStatus] = Field(default_factory=dict)
    spot: SpotPriceSnapshot | None = None
    metrics: DerivedMetrics
    health: FeedHealth = FeedHealth.UNKNOWN
    retry_attempts: dict[str, int] = Field(default_factory=dict)
    retry_pending: bool = False
    last_updated: datetime | None = None
