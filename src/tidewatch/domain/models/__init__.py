"""Domain models for Tidewatch."""

from tidewatch.domain.models.configuration import (
    DEFAULT_SERIES,
    SPOT_SERIES_ID,
    AcquisitionConfig,
    Bounds,
    ScoringBounds,
    SeriesRole,
    SeriesSpec,
)
from tidewatch.domain.models.fetch_results import FailureKind, FetchResult, FetchStatus
from tidewatch.domain.models.macro import Observation, SpotPriceSnapshot
from tidewatch.domain.models.regime import (
    Current,
    DerivedMetrics,
    FeedHealth,
    FeedSnapshot,
    Regime,
    RegimeScores,
)

__all__ = [
    "Observation",
    "SpotPriceSnapshot",
    # Fetch results
    "FetchResult",
    "FetchStatus",
    "FailureKind",
    # Configuration
    "AcquisitionConfig",
    "Bounds",
    "ScoringBounds",
    "SeriesRole",
    "SeriesSpec",
    "DEFAULT_SERIES",
    "SPOT_SERIES_ID",
    # Regime
    "Current",
    "DerivedMetrics",
    "FeedHealth",
    "FeedSnapshot",
    "Regime",
    "RegimeScores",
]
