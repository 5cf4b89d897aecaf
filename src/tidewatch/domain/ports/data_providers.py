"""Data provider ports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from tidewatch.domain.models.configuration import SeriesSpec
from tidewatch.domain.models.fetch_results import FetchResult


class DataProvider(ABC):
    """Common surface of every upstream data provider."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Short provider identifier used in logs (e.g., 'fred')."""

    async def close(self) -> None:  # noqa: B027
        """Release network resources. Default is a no-op."""


class MacroeconomicDataProvider(DataProvider):
    """Provider of timestamped macroeconomic observations."""

    @abstractmethod
    async def fetch_observations(self, spec: SeriesSpec, **params: Any) -> FetchResult:
        """Fetch one series.

        Must never raise: failures are returned as ``FetchResult.failure``.
        On success ``data`` is a ``list[Observation]`` (possibly empty).
        """


class SpotPriceProvider(DataProvider):
    """Provider of a current crypto spot price."""

    @abstractmethod
    async def fetch_spot_price(self) -> FetchResult:
        """Fetch the current USD price.

        Must never raise. On success ``data`` is a ``float``.
        """
