"""Liquidity regime scoring.

Three normalized sub-scores feed one composite:

- tides: liquidity growth and the (inverse) real long rate
- waves: real output growth and the (inverse) policy gap
- seafloor: productivity growth

Missing inputs never fail the computation. A missing YoY or level maps to the
neutral midpoint in ``normalize``; a spread with a missing operand is taken as 0.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import structlog

from tidewatch.domain.models.configuration import (
    AcquisitionConfig,
    Bounds,
    ScoringBounds,
    SeriesRole,
)
from tidewatch.domain.models.macro import Observation
from tidewatch.domain.models.regime import Current, DerivedMetrics, Regime, RegimeScores
from tidewatch.infrastructure.analysis.observations import (
    latest_valid_value,
    three_month_change,
    trailing_window,
    year_over_year_change,
)

logger = structlog.get_logger(__name__)

TIDES_WEIGHTS = (0.6, 0.4)
WAVES_WEIGHTS = (0.5, 0.5)
COMPOSITE_WEIGHTS = (0.5, 0.35, 0.15)

RISK_ON_THRESHOLD = 0.7
NEUTRAL_THRESHOLD = 0.4
QUADRANT_THRESHOLD = 0.5

COMPOSITE_PRECISION = 2

_OUTLOOKS = {
    Current.RISING: "Liquidity is expanding and the cycle is supportive.",
    Current.RISING_FADING: "Liquidity is supportive but cyclical momentum is fading.",
    Current.REBOUND: "The cycle is recovering while liquidity stays tight.",
    Current.EBB: "Liquidity is draining and the cycle is weakening.",
}


def normalize(value: float | None, low: float, high: float) -> float:
    """Map ``value`` linearly from ``[low, high]`` onto ``[0, 1]``, clamped.

    A missing value (or degenerate bounds) returns the midpoint 0.5.
    """
    if value is None or high == low:
        return 0.5
    scaled = (value - low) / (high - low)
    return min(1.0, max(0.0, scaled))


def _norm(value: float | None, bounds: Bounds) -> float:
    return normalize(value, bounds.low, bounds.high)


def _spread(left: float | None, right: float | None) -> float:
    if left is None or right is None:
        return 0.0
    return left - right


def classify_regime(composite: float) -> Regime:
    if composite >= RISK_ON_THRESHOLD:
        return Regime.RISK_ON
    if composite >= NEUTRAL_THRESHOLD:
        return Regime.NEUTRAL
    return Regime.RISK_OFF


def classify_current(tides: float, waves: float) -> Current:
    high_tide = tides > QUADRANT_THRESHOLD
    strong_waves = waves > QUADRANT_THRESHOLD
    if high_tide and strong_waves:
        return Current.RISING
    if high_tide:
        return Current.RISING_FADING
    if strong_waves:
        return Current.REBOUND
    return Current.EBB


def score_components(
    *,
    liquidity_yoy: float | None,
    real_rate: float,
    real_growth: float,
    policy_gap: float,
    productivity_yoy: float | None,
    bounds: ScoringBounds | None = None,
) -> RegimeScores:
    """Compute sub-scores, composite, regime and current from scalar inputs.

    The composite is rounded to two decimals before classification so the
    regime always agrees with the reported score.
    """
    bounds = bounds or ScoringBounds()

    tides = (
        TIDES_WEIGHTS[0] * _norm(liquidity_yoy, bounds.liquidity_yoy)
        + TIDES_WEIGHTS[1] * _norm(-real_rate, bounds.inverse_real_rate)
    )
    waves = (
        WAVES_WEIGHTS[0] * _norm(real_growth, bounds.real_growth)
        + WAVES_WEIGHTS[1] * _norm(-policy_gap, bounds.inverse_policy_gap)
    )
    seafloor = _norm(productivity_yoy, bounds.productivity_yoy)

    raw = (
        COMPOSITE_WEIGHTS[0] * tides
        + COMPOSITE_WEIGHTS[1] * waves
        + COMPOSITE_WEIGHTS[2] * seafloor
    )
    # Classified on the reported two-decimal value: 0.695 <= raw < 0.7 is Risk-On.
    composite = round(raw, COMPOSITE_PRECISION)

    return RegimeScores(
        tides=tides,
        waves=waves,
        seafloor=seafloor,
        composite=composite,
        regime=classify_regime(composite),
        current=classify_current(tides, waves),
    )


def describe_outlook(scores: RegimeScores) -> str:
    return f"{scores.current.value} current, {scores.regime.value}: {_OUTLOOKS[scores.current]}"


def score_regime(
    series: Mapping[str, Sequence[Observation]],
    spot_price: float | None = None,
    config: AcquisitionConfig | None = None,
) -> DerivedMetrics:
    """Derive all regime metrics from a snapshot of the series store.

    Args:
        series: Series id to observation sequence. Missing ids are fine.
        spot_price: Current spot price, if known.
        config: Session configuration resolving series roles and bounds.

    Returns:
        DerivedMetrics value object
    """
    config = config or AcquisitionConfig()

    def _role(role: SeriesRole) -> Sequence[Observation] | None:
        series_id = config.series_for_role(role)
        return series.get(series_id) if series_id is not None else None

    liquidity = _role(SeriesRole.LIQUIDITY)
    liquidity_yoy = year_over_year_change(liquidity)
    output_yoy = year_over_year_change(_role(SeriesRole.OUTPUT))
    price_level_yoy = year_over_year_change(_role(SeriesRole.PRICE_LEVEL))
    productivity_yoy = year_over_year_change(_role(SeriesRole.PRODUCTIVITY))
    long_rate = latest_valid_value(_role(SeriesRole.LONG_RATE))
    policy_rate = latest_valid_value(_role(SeriesRole.POLICY_RATE))

    real_rate = _spread(long_rate, price_level_yoy)
    policy_gap = _spread(policy_rate, price_level_yoy)
    real_growth = _spread(output_yoy, price_level_yoy)

    scores = score_components(
        liquidity_yoy=liquidity_yoy,
        real_rate=real_rate,
        real_growth=real_growth,
        policy_gap=policy_gap,
        productivity_yoy=productivity_yoy,
        bounds=config.bounds,
    )

    trends = {
        spec.series_id: trailing_window(series.get(spec.series_id), config.trend_window)
        for spec in config.series
    }

    logger.debug(
        "Regime scored",
        composite=scores.composite,
        regime=scores.regime.value,
        current=scores.current.value,
    )

    return DerivedMetrics(
        liquidity_yoy=liquidity_yoy,
        liquidity_3m_change=three_month_change(liquidity),
        output_yoy=output_yoy,
        price_level_yoy=price_level_yoy,
        productivity_yoy=productivity_yoy,
        long_rate=long_rate,
        policy_rate=policy_rate,
        real_rate=real_rate,
        policy_gap=policy_gap,
        real_growth=real_growth,
        spot_price=spot_price,
        scores=scores,
        outlook=describe_outlook(scores),
        trends=trends,
    )
