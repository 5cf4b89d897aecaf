"""Pure numeric analysis over parsed series."""

from tidewatch.infrastructure.analysis.feed_health import aggregate_feed_health
from tidewatch.infrastructure.analysis.observations import (
    latest_valid_value,
    parse_observations,
    period_change,
    three_month_change,
    trailing_window,
    year_over_year_change,
)
from tidewatch.infrastructure.analysis.scoring import normalize, score_components, score_regime

__all__ = [
    "aggregate_feed_health",
    "latest_valid_value",
    "normalize",
    "parse_observations",
    "period_change",
    "score_components",
    "score_regime",
    "three_month_change",
    "trailing_window",
    "year_over_year_change",
]
