"""Unit tests for regime scoring."""

from __future__ import annotations

import pytest

from tidewatch.domain.models.configuration import AcquisitionConfig
from tidewatch.domain.models.macro import Observation
from tidewatch.domain.models.regime import Current, Regime
from tidewatch.infrastructure.analysis.scoring import (
    classify_current,
    classify_regime,
    normalize,
    score_components,
    score_regime,
)


def _yoy_series(base: float, last: float) -> list[Observation]:
    values = [base] * 12 + [last]
    return [
        Observation(timestamp=f"{2023 + i // 12}-{i % 12 + 1:02d}-01", value=str(v))
        for i, v in enumerate(values)
    ]


def _level_series(*values: object) -> list[Observation]:
    return [Observation(timestamp=f"2024-01-{i + 1:02d}", value=v) for i, v in enumerate(values)]


@pytest.mark.unit
class TestNormalize:
    @pytest.mark.parametrize(("low", "high"), [(-5, 10), (-3, 3), (0, 1), (100, 200)])
    def test_missing_value_is_midpoint(self, low: float, high: float) -> None:
        assert normalize(None, low, high) == 0.5

    def test_linear_inside_bounds(self) -> None:
        assert normalize(2.5, -5, 10) == pytest.approx(0.5)
        assert normalize(-5, -5, 10) == 0.0
        assert normalize(10, -5, 10) == 1.0

    def test_clamped_outside_bounds(self) -> None:
        assert normalize(-100, -5, 10) == 0.0
        assert normalize(100, -5, 10) == 1.0

    def test_monotonic_and_bounded(self) -> None:
        values = [x / 4 for x in range(-80, 81)]
        scores = [normalize(v, -5, 5) for v in values]
        assert all(0.0 <= s <= 1.0 for s in scores)
        assert all(a <= b for a, b in zip(scores, scores[1:], strict=False))

    def test_degenerate_bounds(self) -> None:
        assert normalize(3.0, 1.0, 1.0) == 0.5


@pytest.mark.unit
class TestScoreComponents:
    def test_risk_on_rising_scenario(self) -> None:
        scores = score_components(
            liquidity_yoy=8,
            real_rate=-1,
            real_growth=2,
            policy_gap=-1,
            productivity_yoy=1,
        )

        assert scores.tides > 0.5
        assert scores.waves > 0.5
        assert scores.tides == pytest.approx(0.6 * 13 / 15 + 0.4 * 4 / 6)
        assert scores.waves == pytest.approx(0.65)
        assert scores.seafloor == pytest.approx(0.5)
        assert scores.composite >= 0.7
        assert scores.regime is Regime.RISK_ON
        assert scores.current is Current.RISING

    def test_all_missing_is_neutral(self) -> None:
        scores = score_components(
            liquidity_yoy=None,
            real_rate=0.0,
            real_growth=0.0,
            policy_gap=0.0,
            productivity_yoy=None,
        )

        assert scores.tides == pytest.approx(0.5)
        assert scores.waves == pytest.approx(0.5)
        assert scores.seafloor == 0.5
        assert scores.composite == pytest.approx(0.5)
        assert scores.regime is Regime.NEUTRAL
        # Exactly 0.5 is not above the quadrant threshold.
        assert scores.current is Current.EBB

    def test_risk_off_ebb(self) -> None:
        scores = score_components(
            liquidity_yoy=-10,
            real_rate=5,
            real_growth=-6,
            policy_gap=6,
            productivity_yoy=-3,
        )

        assert scores.composite == 0.0
        assert scores.regime is Regime.RISK_OFF
        assert scores.current is Current.EBB

    def test_rising_fading_and_rebound(self) -> None:
        fading = score_components(
            liquidity_yoy=10, real_rate=-3, real_growth=-5, policy_gap=5, productivity_yoy=None
        )
        rebound = score_components(
            liquidity_yoy=-5, real_rate=3, real_growth=5, policy_gap=-5, productivity_yoy=None
        )

        assert fading.current is Current.RISING_FADING
        assert rebound.current is Current.REBOUND


@pytest.mark.unit
class TestClassifiers:
    @pytest.mark.parametrize(
        ("composite", "expected"),
        [
            (1.0, Regime.RISK_ON),
            (0.7, Regime.RISK_ON),
            (0.69, Regime.NEUTRAL),
            (0.4, Regime.NEUTRAL),
            (0.39, Regime.RISK_OFF),
            (0.0, Regime.RISK_OFF),
        ],
    )
    def test_classify_regime(self, composite: float, expected: Regime) -> None:
        assert classify_regime(composite) is expected

    def test_classify_current_ties_go_below(self) -> None:
        assert classify_current(0.5, 0.51) is Current.REBOUND
        assert classify_current(0.51, 0.5) is Current.RISING_FADING
        assert classify_current(0.5, 0.5) is Current.EBB


@pytest.mark.unit
class TestScoreRegime:
    def test_empty_store_degrades_to_neutral(self) -> None:
        metrics = score_regime({}, None)

        assert metrics.liquidity_yoy is None
        assert metrics.long_rate is None
        assert metrics.real_rate == 0.0
        assert metrics.policy_gap == 0.0
        assert metrics.real_growth == 0.0
        assert metrics.regime is Regime.NEUTRAL
        assert metrics.spot_price is None
        assert all(window is None for window in metrics.trends.values())

    def test_full_store(self) -> None:
        series = {
            "M2SL": _yoy_series(100, 108),
            "GDPC1": _yoy_series(100, 105),
            "CPIAUCSL": _yoy_series(100, 103),
            "OPHNFB": _yoy_series(100, 101),
            "DGS10": _level_series("2.0", "."),
            "FEDFUNDS": _level_series("2.0"),
        }
        metrics = score_regime(series, 65000.0, AcquisitionConfig())

        assert metrics.liquidity_yoy == pytest.approx(8.0)
        assert metrics.price_level_yoy == pytest.approx(3.0)
        assert metrics.long_rate == pytest.approx(2.0)
        assert metrics.real_rate == pytest.approx(-1.0)
        assert metrics.policy_gap == pytest.approx(-1.0)
        assert metrics.real_growth == pytest.approx(2.0)
        assert metrics.regime is Regime.RISK_ON
        assert metrics.current is Current.RISING
        assert metrics.spot_price == 65000.0
        assert metrics.trends["DGS10"] == [2.0]
        assert "Rising" in metrics.outlook

    def test_missing_cpi_zeroes_spreads(self) -> None:
        series = {"DGS10": _level_series("4.5"), "FEDFUNDS": _level_series("5.25")}
        metrics = score_regime(series)

        assert metrics.long_rate == pytest.approx(4.5)
        assert metrics.real_rate == 0.0
        assert metrics.policy_gap == 0.0

    def test_is_deterministic(self) -> None:
        series = {"M2SL": _yoy_series(100, 104)}
        assert score_regime(series, 1.0) == score_regime(series, 1.0)
