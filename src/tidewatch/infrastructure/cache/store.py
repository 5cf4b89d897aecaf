"""Last-known-good cache for series observations and the spot price."""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from pydantic import TypeAdapter, ValidationError

from tidewatch.domain.models.macro import Observation, SpotPriceSnapshot
from tidewatch.domain.ports.cache import CacheBackend

logger = structlog.get_logger(__name__)

SERIES_KEY_PREFIX = "series:"
SPOT_KEY = "spot:price"

_observations_adapter = TypeAdapter(list[Observation])


def series_key(series_id: str) -> str:
    return f"{SERIES_KEY_PREFIX}{series_id}"


class SeriesCacheStore:
    """Per-series persistence on top of a CacheBackend.

    ``load`` and ``load_spot`` never raise: unreadable or corrupt entries are
    logged and reported as absent.
    """

    def __init__(self, backend: CacheBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    def save(self, series_id: str, observations: Sequence[Observation]) -> None:
        """Persist a validated sequence. Empty sequences are not written."""
        if not observations:
            logger.debug("Skipping cache write for empty series", series_id=series_id)
            return
        payload = _observations_adapter.dump_json(list(observations)).decode("utf-8")
        try:
            self._backend.set(series_key(series_id), payload)
        except OSError as e:
            logger.warning("Cache write failed", series_id=series_id, error=str(e))

    def load(self, series_id: str) -> list[Observation]:
        try:
            raw = self._backend.get(series_key(series_id))
        except (OSError, ValueError) as e:
            logger.warning("Cache read failed", series_id=series_id, error=str(e))
            return []
        if raw is None:
            return []
        try:
            return _observations_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Discarding corrupt cache entry", series_id=series_id, error_count=e.error_count()
            )
            return []

    def save_spot(self, snapshot: SpotPriceSnapshot) -> None:
        try:
            self._backend.set(SPOT_KEY, snapshot.model_dump_json())
        except OSError as e:
            logger.warning("Spot price cache write failed", error=str(e))

    def load_spot(self) -> SpotPriceSnapshot | None:
        try:
            raw = self._backend.get(SPOT_KEY)
        except (OSError, ValueError) as e:
            logger.warning("Spot price cache read failed", error=str(e))
            return None
        if raw is None:
            return None
        try:
            return SpotPriceSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding corrupt spot price cache entry", error_count=e.error_count())
            return None

    def cached_series_ids(self) -> list[str]:
        return [
            key[len(SERIES_KEY_PREFIX) :]
            for key in self._backend.keys()
            if key.startswith(SERIES_KEY_PREFIX)
        ]
