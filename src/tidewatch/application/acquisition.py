"""Acquisition coordinator: concurrent fetch, cache reconciliation and bounded retries.

One coordinator serves one client session. It owns the series store, the status
map and the retry counters; everything it hands out is a copy.

Cycle state machine:

1. Dispatch one fetch per configured series plus the spot price, concurrently,
   and wait until every one has settled.
2. Reconcile each result on its own: fresh data is stored and cached (``OK``),
   a failure falls back to the cache (``CACHE``) or to an empty value (``FAIL``).
3. If any series is ``FAIL`` and still under the retry ceiling, schedule a
   retry task unless one is already pending.
4. A retry round re-fetches only ``FAIL`` series, after incrementing their
   attempt counters, and reschedules itself while retryable failures remain.

``run_cycle`` resets counters and cancels any pending retry task. A stale task
that still wakes up compares its generation and does nothing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

import structlog

from tidewatch.domain.models.configuration import AcquisitionConfig
from tidewatch.domain.models.fetch_results import FailureKind, FetchResult, FetchStatus
from tidewatch.domain.models.macro import Observation, SpotPriceSnapshot
from tidewatch.domain.models.regime import DerivedMetrics, FeedHealth, FeedSnapshot
from tidewatch.domain.ports.data_providers import MacroeconomicDataProvider, SpotPriceProvider
from tidewatch.infrastructure.analysis.feed_health import aggregate_feed_health
from tidewatch.infrastructure.analysis.scoring import score_regime
from tidewatch.infrastructure.cache.store import SeriesCacheStore

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AcquisitionCoordinator:
    """Orchestrates acquisition cycles and retry rounds for one session."""

    def __init__(
        self,
        config: AcquisitionConfig,
        macro_data_provider: MacroeconomicDataProvider,
        spot_price_provider: SpotPriceProvider,
        cache_store: SeriesCacheStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._macro_provider = macro_data_provider
        self._spot_provider = spot_price_provider
        self._cache = cache_store
        self._clock = clock

        self._series: dict[str, list[Observation]] = {}
        self._statuses: dict[str, FetchStatus] = {}
        self._spot: SpotPriceSnapshot | None = None
        self._retry_attempts: dict[str, int] = {}
        self._last_updated: datetime | None = None

        self._lock = asyncio.Lock()
        self._generation = 0
        self._retry_task: asyncio.Task[None] | None = None

        self._metrics = score_regime(self._series, None, self._config)
        self._health = aggregate_feed_health(self._statuses)

    # ------------------------------------------------------------------
    # Consumer interface
    # ------------------------------------------------------------------

    @property
    def config(self) -> AcquisitionConfig:
        return self._config

    @property
    def series(self) -> dict[str, list[Observation]]:
        return {series_id: list(obs) for series_id, obs in self._series.items()}

    @property
    def statuses(self) -> dict[str, FetchStatus]:
        return dict(self._statuses)

    @property
    def spot(self) -> SpotPriceSnapshot | None:
        return self._spot

    @property
    def metrics(self) -> DerivedMetrics:
        return self._metrics

    @property
    def health(self) -> FeedHealth:
        return self._health

    @property
    def retry_attempts(self) -> dict[str, int]:
        return dict(self._retry_attempts)

    @property
    def retry_pending(self) -> bool:
        return self._retry_task is not None and not self._retry_task.done()

    def snapshot(self) -> FeedSnapshot:
        return FeedSnapshot(
            series=self.series,
            statuses=self.statuses,
            spot=self._spot,
            metrics=self._metrics,
            health=self._health,
            retry_attempts=self.retry_attempts,
            retry_pending=self.retry_pending,
            last_updated=self._last_updated,
        )

    async def run_cycle(self) -> FeedSnapshot:
        """Run one full acquisition cycle over every configured series.

        Supersedes any pending retry round and resets attempt counters. Always
        settles, however many individual fetches fail.
        """
        self._cancel_retry()
        async with self._lock:
            self._cancel_retry()
            self._generation += 1
            self._retry_attempts = {series_id: 0 for series_id in self._config.series_ids}

            series_ids = self._config.series_ids
            logger.info(
                "Acquisition cycle started", generation=self._generation, series=len(series_ids)
            )
            await self._acquire(series_ids)
            logger.info(
                "Acquisition cycle finished",
                generation=self._generation,
                health=self._health.value,
                statuses={k: v.value for k, v in self._statuses.items()},
            )
            self._schedule_retry()
        return self.snapshot()

    async def wait_for_retries(self) -> None:
        """Wait until no retry task is pending (finished, abandoned or cancelled).

        Cancelling the waiter leaves the retry task running.
        """
        while self.retry_pending:
            task = self._retry_task
            if task is None:
                break
            await asyncio.wait({task})

    async def aclose(self) -> None:
        self._cancel_retry()
        await self._macro_provider.close()
        await self._spot_provider.close()

    # ------------------------------------------------------------------
    # Dispatch and reconcile
    # ------------------------------------------------------------------

    async def _fetch(self, series_id: str) -> FetchResult:
        if series_id == self._config.spot_series_id:
            return await self._spot_provider.fetch_spot_price()
        spec = self._config.get_spec(series_id)
        if spec is None:
            return FetchResult.failure(FailureKind.MISSING_FIELD, f"Unknown series {series_id}")
        return await self._macro_provider.fetch_observations(
            spec, **self._config.request_params(spec)
        )

    async def _acquire(self, series_ids: Iterable[str]) -> None:
        """Fetch ``series_ids`` concurrently, then reconcile all results at once."""
        ids = list(series_ids)
        results = await asyncio.gather(
            *(self._fetch(series_id) for series_id in ids), return_exceptions=True
        )

        for series_id, result in zip(ids, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "Unexpected error while fetching series",
                    series_id=series_id,
                    error=str(result),
                    error_type=type(result).__name__,
                )
                result = FetchResult.failure(
                    FailureKind.TRANSPORT,
                    f"{type(result).__name__}: {result}",
                    error_type=type(result).__name__,
                )
            if series_id == self._config.spot_series_id:
                self._reconcile_spot(result)
            else:
                self._reconcile_series(series_id, result)

        self._last_updated = self._clock()
        self._refresh_derived()

    def _reconcile_series(self, series_id: str, result: FetchResult) -> None:
        if result.success:
            observations = list(result.data or [])
            self._series[series_id] = observations
            self._cache.save(series_id, observations)
            self._statuses[series_id] = FetchStatus.OK
            return

        cached = self._cache.load(series_id)
        if cached:
            logger.warning(
                "Series fetch failed; using cached observations",
                series_id=series_id,
                failure_kind=result.failure_kind.value if result.failure_kind else None,
                cached_points=len(cached),
            )
            self._series[series_id] = cached
            self._statuses[series_id] = FetchStatus.CACHE
        else:
            logger.warning(
                "Series fetch failed with no cache",
                series_id=series_id,
                failure_kind=result.failure_kind.value if result.failure_kind else None,
                error=result.error,
            )
            self._series[series_id] = []
            self._statuses[series_id] = FetchStatus.FAIL

    def _reconcile_spot(self, result: FetchResult) -> None:
        series_id = self._config.spot_series_id
        if result.success and result.data is not None:
            snapshot = SpotPriceSnapshot(price=float(result.data), captured_at=self._clock())
            self._spot = snapshot
            self._cache.save_spot(snapshot)
            self._statuses[series_id] = FetchStatus.OK
            return

        cached = self._cache.load_spot()
        if cached is not None:
            logger.warning(
                "Spot price fetch failed; using cached price",
                captured_at=cached.captured_at.isoformat(),
            )
            self._spot = cached
            self._statuses[series_id] = FetchStatus.CACHE
        else:
            logger.warning("Spot price fetch failed with no cache", error=result.error)
            self._spot = None
            self._statuses[series_id] = FetchStatus.FAIL

    def _refresh_derived(self) -> None:
        spot_price = self._spot.price if self._spot is not None else None
        self._metrics = score_regime(self._series, spot_price, self._config)
        self._health = aggregate_feed_health(self._statuses)

    # ------------------------------------------------------------------
    # Retry scheduling
    # ------------------------------------------------------------------

    def _retryable_failures(self) -> list[str]:
        ceiling = self._config.retry_ceiling
        return [
            series_id
            for series_id, status in self._statuses.items()
            if status is FetchStatus.FAIL and self._retry_attempts.get(series_id, 0) < ceiling
        ]

    def _schedule_retry(self) -> None:
        if not self._retryable_failures():
            return
        if self.retry_pending:
            return
        generation = self._generation
        self._retry_task = asyncio.create_task(
            self._retry_loop(generation), name=f"tidewatch-retry-{generation}"
        )
        logger.info(
            "Retry round scheduled",
            generation=generation,
            delay_seconds=self._config.retry_delay_seconds,
        )

    def _cancel_retry(self) -> None:
        task, self._retry_task = self._retry_task, None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Pending retry round cancelled", task=task.get_name())

    async def _retry_loop(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self._config.retry_delay_seconds)
            async with self._lock:
                if generation != self._generation:
                    return
                await self._retry_round()
                if not self._retryable_failures():
                    return

    async def _retry_round(self) -> None:
        ceiling = self._config.retry_ceiling
        due: list[str] = []
        for series_id, status in list(self._statuses.items()):
            if status is not FetchStatus.FAIL:
                continue
            attempts = self._retry_attempts.get(series_id, 0) + 1
            self._retry_attempts[series_id] = attempts
            if attempts > ceiling:
                continue
            due.append(series_id)

        if not due:
            return

        logger.info("Retry round started", generation=self._generation, series=due)
        await self._acquire(due)

        abandoned = [
            series_id
            for series_id in due
            if self._statuses.get(series_id) is FetchStatus.FAIL
            and self._retry_attempts[series_id] >= ceiling
        ]
        if abandoned:
            logger.warning(
                "Retry ceiling reached; series left failed until next cycle",
                series=abandoned,
                ceiling=ceiling,
            )
