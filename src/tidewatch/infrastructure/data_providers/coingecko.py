"""CoinGecko spot price provider."""

from __future__ import annotations

import math
from typing import Any

import httpx
import structlog

from tidewatch.domain.exceptions import FetchError, MissingFieldError
from tidewatch.domain.models.fetch_results import FetchResult
from tidewatch.domain.ports.data_providers import SpotPriceProvider
from tidewatch.infrastructure.data_providers.base import ResilientHttpProvider

logger = structlog.get_logger(__name__)

PRICE_FIELD_PATH = ("market_data", "current_price", "usd")

_COIN_QUERY = {
    "localization": "false",
    "tickers": "false",
    "market_data": "true",
    "community_data": "false",
    "developer_data": "false",
    "sparkline": "false",
}


def extract_usd_price(payload: Any) -> float:
    """Read ``market_data.current_price.usd`` or raise MissingFieldError."""
    node = payload
    for key in PRICE_FIELD_PATH:
        if not isinstance(node, dict) or key not in node:
            raise MissingFieldError(f"Missing field {'.'.join(PRICE_FIELD_PATH)}")
        node = node[key]

    if isinstance(node, bool) or not isinstance(node, (int, float, str)):
        raise MissingFieldError(f"Non-numeric price: {node!r}")
    try:
        price = float(node)
    except ValueError as e:
        raise MissingFieldError(f"Non-numeric price: {node!r}") from e
    if not math.isfinite(price):
        raise MissingFieldError(f"Non-finite price: {node!r}")
    return price


class CoinGeckoSpotPriceProvider(ResilientHttpProvider, SpotPriceProvider):
    """CoinGecko implementation of SpotPriceProvider (coin detail endpoint)."""

    def __init__(
        self,
        coin_id: str = "bitcoin",
        base_url: str = "https://api.coingecko.com/api/v3",
        timeout_seconds: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, timeout_seconds=timeout_seconds, transport=transport)
        self._coin_id = coin_id

    def get_provider_name(self) -> str:
        return "coingecko"

    async def fetch_spot_price(self) -> FetchResult:
        try:
            payload = await self._get_json(f"/coins/{self._coin_id}", params=dict(_COIN_QUERY))
            price = extract_usd_price(payload)
        except FetchError as e:
            logger.warning(
                "CoinGecko fetch failed",
                coin_id=self._coin_id,
                failure_kind=e.failure_kind.value,
                status_code=e.status_code,
                error=str(e),
            )
            return FetchResult.failure(
                e.failure_kind,
                str(e),
                status_code=e.status_code,
                provider=self.get_provider_name(),
            )

        logger.debug("CoinGecko fetch succeeded", coin_id=self._coin_id, price=price)
        return FetchResult.ok(price, provider=self.get_provider_name())
