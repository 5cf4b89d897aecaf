"""Unit tests for the acquisition coordinator."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any

import pytest

from tidewatch.application.acquisition import AcquisitionCoordinator
from tidewatch.domain.models.configuration import AcquisitionConfig, SeriesRole, SeriesSpec
from tidewatch.domain.models.fetch_results import FailureKind, FetchResult, FetchStatus
from tidewatch.domain.models.macro import Observation
from tidewatch.domain.models.regime import FeedHealth
from tidewatch.domain.ports.data_providers import MacroeconomicDataProvider, SpotPriceProvider
from tidewatch.infrastructure.cache import InMemoryCacheBackend, SeriesCacheStore

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

CONFIG = AcquisitionConfig(
    series=(
        SeriesSpec(series_id="A", provider_series_id="A", role=SeriesRole.LIQUIDITY),
        SeriesSpec(series_id="B", provider_series_id="B", role=SeriesRole.LONG_RATE),
        SeriesSpec(series_id="C", provider_series_id="C"),
    ),
    spot_series_id="SPOT",
    retry_delay_seconds=0.0,
    retry_ceiling=3,
)


def _obs(*values: str) -> list[Observation]:
    return [Observation(timestamp=f"2024-{i + 1:02d}-01", value=v) for i, v in enumerate(values)]


def _ok(data: Any) -> FetchResult:
    return FetchResult.ok(data)


def _fail(kind: FailureKind = FailureKind.TRANSPORT) -> FetchResult:
    return FetchResult.failure(kind, "upstream down")


class _StubMacroProvider(MacroeconomicDataProvider):
    """Returns queued results per series; the last queued result repeats."""

    def __init__(self, responses: dict[str, list[FetchResult | Exception]]) -> None:
        self.responses = responses
        self.calls: list[str] = []
        self.params: dict[str, dict[str, Any]] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    def get_provider_name(self) -> str:
        return "stub"

    async def fetch_observations(self, spec: SeriesSpec, **params: Any) -> FetchResult:
        self.calls.append(spec.series_id)
        self.params[spec.series_id] = params
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.001)
        finally:
            self.in_flight -= 1
        queue = self.responses.get(spec.series_id, [_fail()])
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def count(self, series_id: str) -> int:
        return self.calls.count(series_id)


class _StubSpotProvider(SpotPriceProvider):
    def __init__(self, responses: list[FetchResult]) -> None:
        self.responses = responses
        self.calls = 0

    def get_provider_name(self) -> str:
        return "stub-spot"

    async def fetch_spot_price(self) -> FetchResult:
        self.calls += 1
        return self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]


def _coordinator(
    macro: _StubMacroProvider,
    spot: _StubSpotProvider,
    config: AcquisitionConfig = CONFIG,
    store: SeriesCacheStore | None = None,
) -> AcquisitionCoordinator:
    return AcquisitionCoordinator(
        config=config,
        macro_data_provider=macro,
        spot_price_provider=spot,
        cache_store=store or SeriesCacheStore(InMemoryCacheBackend()),
        clock=lambda: NOW,
    )


def _all_ok() -> dict[str, list[FetchResult | Exception]]:
    return {
        "A": [_ok(_obs("100", "101"))],
        "B": [_ok(_obs("4.1", "4.2"))],
        "C": [_ok(_obs("1"))],
    }


@pytest.mark.unit
class TestAcquisitionCycle:
    @pytest.mark.asyncio
    async def test_before_first_cycle(self) -> None:
        coordinator = _coordinator(_StubMacroProvider({}), _StubSpotProvider([_fail()]))
        snapshot = coordinator.snapshot()

        assert snapshot.statuses == {}
        assert snapshot.health is FeedHealth.UNKNOWN
        assert snapshot.last_updated is None

    @pytest.mark.asyncio
    async def test_all_fresh(self) -> None:
        macro = _StubMacroProvider(_all_ok())
        store = SeriesCacheStore(InMemoryCacheBackend())
        coordinator = _coordinator(macro, _StubSpotProvider([_ok(65000.0)]), store=store)

        snapshot = await coordinator.run_cycle()

        assert snapshot.statuses == {
            "A": FetchStatus.OK,
            "B": FetchStatus.OK,
            "C": FetchStatus.OK,
            "SPOT": FetchStatus.OK,
        }
        assert snapshot.health is FeedHealth.STABLE
        assert snapshot.series["B"] == _obs("4.1", "4.2")
        assert snapshot.spot is not None and snapshot.spot.price == 65000.0
        assert snapshot.spot.captured_at == NOW
        assert snapshot.metrics.spot_price == 65000.0
        assert snapshot.metrics.long_rate == pytest.approx(4.2)
        assert snapshot.retry_pending is False
        assert snapshot.last_updated == NOW
        assert store.load("A") == _obs("100", "101")
        assert store.load_spot() == snapshot.spot

    @pytest.mark.asyncio
    async def test_request_params_include_observation_start(self) -> None:
        macro = _StubMacroProvider(_all_ok())
        await _coordinator(macro, _StubSpotProvider([_ok(1.0)])).run_cycle()

        assert macro.params["A"] == {"observation_start": "2010-01-01"}

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self) -> None:
        macro = _StubMacroProvider(_all_ok())
        await _coordinator(macro, _StubSpotProvider([_ok(1.0)])).run_cycle()

        assert macro.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_every_series_has_a_status_on_total_outage(self) -> None:
        config = CONFIG.model_copy(update={"retry_ceiling": 0})
        coordinator = _coordinator(
            _StubMacroProvider({}), _StubSpotProvider([_fail()]), config=config
        )

        snapshot = await coordinator.run_cycle()

        assert set(snapshot.statuses) == {"A", "B", "C", "SPOT"}
        assert all(status is FetchStatus.FAIL for status in snapshot.statuses.values())
        assert snapshot.series["A"] == []
        assert snapshot.spot is None
        assert snapshot.health is FeedHealth.OUTAGE
        assert snapshot.retry_pending is False

    @pytest.mark.asyncio
    async def test_cache_fallback_on_failure(self) -> None:
        responses = _all_ok()
        responses["A"] = [_ok(_obs("100", "101")), _fail(FailureKind.UNEXPECTED_FORMAT)]
        macro = _StubMacroProvider(responses)
        spot = _StubSpotProvider([_ok(65000.0), _fail(FailureKind.HTTP)])
        coordinator = _coordinator(macro, spot)

        first = await coordinator.run_cycle()
        second = await coordinator.run_cycle()

        assert second.statuses["A"] is FetchStatus.CACHE
        assert second.series["A"] == first.series["A"]
        assert second.statuses["SPOT"] is FetchStatus.CACHE
        assert second.spot == first.spot
        assert second.health is FeedHealth.DEGRADED
        assert second.retry_pending is False

    @pytest.mark.asyncio
    async def test_empty_list_is_ok_and_not_retried(self) -> None:
        responses = _all_ok()
        responses["C"] = [_ok([])]
        macro = _StubMacroProvider(responses)
        coordinator = _coordinator(macro, _StubSpotProvider([_ok(1.0)]))

        snapshot = await coordinator.run_cycle()
        await coordinator.wait_for_retries()

        assert snapshot.statuses["C"] is FetchStatus.OK
        assert snapshot.series["C"] == []
        assert snapshot.retry_pending is False
        assert macro.count("C") == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_failure(self) -> None:
        responses = _all_ok()
        responses["B"] = [RuntimeError("bug in provider")]
        config = CONFIG.model_copy(update={"retry_ceiling": 0})
        coordinator = _coordinator(
            _StubMacroProvider(responses), _StubSpotProvider([_ok(1.0)]), config=config
        )

        snapshot = await coordinator.run_cycle()

        assert snapshot.statuses["B"] is FetchStatus.FAIL
        assert snapshot.statuses["A"] is FetchStatus.OK
        assert snapshot.health is FeedHealth.DEGRADED

    @pytest.mark.asyncio
    async def test_identical_responses_are_idempotent(self) -> None:
        coordinator = _coordinator(_StubMacroProvider(_all_ok()), _StubSpotProvider([_ok(2.0)]))

        first = await coordinator.run_cycle()
        second = await coordinator.run_cycle()

        assert first.statuses == second.statuses
        assert all(status is FetchStatus.OK for status in second.statuses.values())
        assert first.metrics == second.metrics

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self) -> None:
        coordinator = _coordinator(_StubMacroProvider(_all_ok()), _StubSpotProvider([_ok(1.0)]))
        await coordinator.run_cycle()

        coordinator.series["A"].clear()
        coordinator.statuses["A"] = FetchStatus.FAIL

        assert coordinator.series["A"] == _obs("100", "101")
        assert coordinator.statuses["A"] is FetchStatus.OK


@pytest.mark.unit
class TestRetryRounds:
    @pytest.mark.asyncio
    async def test_failed_series_recovers_on_retry(self) -> None:
        responses = _all_ok()
        responses["A"] = [_fail(), _ok(_obs("5"))]
        macro = _StubMacroProvider(responses)
        coordinator = _coordinator(macro, _StubSpotProvider([_ok(1.0)]))

        first = await coordinator.run_cycle()
        assert first.statuses["A"] is FetchStatus.FAIL
        assert first.retry_pending is True

        await coordinator.wait_for_retries()
        snapshot = coordinator.snapshot()

        assert snapshot.statuses["A"] is FetchStatus.OK
        assert snapshot.series["A"] == _obs("5")
        assert snapshot.health is FeedHealth.STABLE
        assert snapshot.retry_attempts["A"] == 1
        assert macro.count("A") == 2
        # Only failed series are retried.
        assert macro.count("B") == 1

    @pytest.mark.asyncio
    async def test_retry_ceiling_abandons_series(self) -> None:
        responses = _all_ok()
        responses["A"] = [_fail()]
        macro = _StubMacroProvider(responses)
        coordinator = _coordinator(macro, _StubSpotProvider([_ok(1.0)]))

        await coordinator.run_cycle()
        await coordinator.wait_for_retries()
        snapshot = coordinator.snapshot()

        assert snapshot.statuses["A"] is FetchStatus.FAIL
        assert snapshot.retry_attempts["A"] == CONFIG.retry_ceiling
        assert snapshot.retry_pending is False
        # One dispatch plus exactly `ceiling` retry rounds.
        assert macro.count("A") == 1 + CONFIG.retry_ceiling

    @pytest.mark.asyncio
    async def test_spot_price_follows_the_same_retry_policy(self) -> None:
        spot = _StubSpotProvider([_fail(), _ok(70000.0)])
        coordinator = _coordinator(_StubMacroProvider(_all_ok()), spot)

        await coordinator.run_cycle()
        await coordinator.wait_for_retries()

        assert coordinator.statuses["SPOT"] is FetchStatus.OK
        assert coordinator.spot is not None and coordinator.spot.price == 70000.0
        assert coordinator.metrics.spot_price == 70000.0
        assert spot.calls == 2

    @pytest.mark.asyncio
    async def test_cached_series_is_not_retried(self) -> None:
        store = SeriesCacheStore(InMemoryCacheBackend())
        store.save("A", _obs("9"))
        responses = _all_ok()
        responses["A"] = [_fail()]
        macro = _StubMacroProvider(responses)
        coordinator = _coordinator(macro, _StubSpotProvider([_ok(1.0)]), store=store)

        snapshot = await coordinator.run_cycle()

        assert snapshot.statuses["A"] is FetchStatus.CACHE
        assert snapshot.series["A"] == _obs("9")
        assert snapshot.retry_pending is False

    @pytest.mark.asyncio
    async def test_new_cycle_cancels_pending_retry_and_resets_counters(self) -> None:
        responses = _all_ok()
        responses["A"] = [_fail()]
        config = CONFIG.model_copy(update={"retry_delay_seconds": 60.0})
        macro = _StubMacroProvider(responses)
        coordinator = _coordinator(macro, _StubSpotProvider([_ok(1.0)]), config=config)

        await coordinator.run_cycle()
        stale_task = coordinator._retry_task
        assert stale_task is not None and not stale_task.done()

        snapshot = await coordinator.run_cycle()
        await asyncio.sleep(0)

        assert stale_task.cancelled()
        assert snapshot.retry_attempts == {"A": 0, "B": 0, "C": 0, "SPOT": 0}
        assert snapshot.retry_pending is True
        assert coordinator._retry_task is not stale_task
        assert macro.count("A") == 2

        await coordinator.aclose()
        assert coordinator.retry_pending is False

    @pytest.mark.asyncio
    async def test_cancelled_waiter_leaves_retry_pending(self) -> None:
        responses = _all_ok()
        responses["A"] = [_fail()]
        config = CONFIG.model_copy(update={"retry_delay_seconds": 60.0})
        coordinator = _coordinator(
            _StubMacroProvider(responses), _StubSpotProvider([_ok(1.0)]), config=config
        )

        await coordinator.run_cycle()
        waiter = asyncio.create_task(coordinator.wait_for_retries())
        await asyncio.sleep(0)
        waiter.cancel()

        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert coordinator.retry_pending is True
        assert coordinator.statuses["A"] is FetchStatus.FAIL

        await coordinator.aclose()

    @pytest.mark.asyncio
    async def test_stale_retry_loop_is_a_no_op(self) -> None:
        responses = _all_ok()
        responses["A"] = [_fail()]
        macro = _StubMacroProvider(responses)
        coordinator = _coordinator(macro, _StubSpotProvider([_ok(1.0)]))

        await coordinator.run_cycle()
        stale_generation = coordinator._generation
        await coordinator.run_cycle()
        coordinator._cancel_retry()

        attempts = coordinator.retry_attempts
        statuses = coordinator.statuses
        calls = macro.count("A")

        await coordinator._retry_loop(stale_generation)

        assert coordinator.retry_attempts == attempts
        assert coordinator.statuses == statuses
        assert macro.count("A") == calls
