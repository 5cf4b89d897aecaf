"""FRED (Federal Reserve Economic Data) observation provider."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from tidewatch.domain.exceptions import FetchError, MissingFieldError
from tidewatch.domain.models.configuration import SeriesSpec
from tidewatch.domain.models.fetch_results import FetchResult
from tidewatch.domain.ports.data_providers import MacroeconomicDataProvider
from tidewatch.infrastructure.analysis.observations import parse_observations
from tidewatch.infrastructure.data_providers.base import ResilientHttpProvider

logger = structlog.get_logger(__name__)


class FredMacroeconomicProvider(ResilientHttpProvider, MacroeconomicDataProvider):
    """FRED implementation of MacroeconomicDataProvider.

    ``base_url`` may point at a pass-through proxy exposing the same
    ``/series/observations`` route; the API key is then optional.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.stlouisfed.org/fred",
        rate_limit_delay: float = 0.0,
        timeout_seconds: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, timeout_seconds=timeout_seconds, transport=transport)
        self._api_key = api_key
        self._rate_limit_delay = rate_limit_delay

    def get_provider_name(self) -> str:
        return "fred"

    async def fetch_observations(self, spec: SeriesSpec, **params: Any) -> FetchResult:
        query: dict[str, Any] = {
            "series_id": spec.provider_series_id,
            "file_type": "json",
            **params,
        }
        if self._api_key:
            query["api_key"] = self._api_key

        if self._rate_limit_delay:
            await asyncio.sleep(self._rate_limit_delay)

        try:
            payload = await self._get_json("/series/observations", params=query)
            if not isinstance(payload, dict) or not isinstance(payload.get("observations"), list):
                raise MissingFieldError(f"No observations list in payload for {spec.series_id}")
            observations = parse_observations(payload["observations"])
        except FetchError as e:
            logger.warning(
                "FRED fetch failed",
                series_id=spec.series_id,
                failure_kind=e.failure_kind.value,
                status_code=e.status_code,
                error=str(e),
            )
            return FetchResult.failure(
                e.failure_kind,
                str(e),
                status_code=e.status_code,
                provider=self.get_provider_name(),
                series_id=spec.series_id,
            )

        logger.debug(
            "FRED fetch succeeded", series_id=spec.series_id, data_points=len(observations)
        )
        return FetchResult.ok(
            observations, provider=self.get_provider_name(), series_id=spec.series_id
        )
