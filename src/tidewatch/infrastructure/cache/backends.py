"""Cache backend implementations."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote, unquote

import structlog

from tidewatch.domain.ports.cache import CacheBackend

logger = structlog.get_logger(__name__)


class InMemoryCacheBackend(CacheBackend):
    """Process-local dictionary backend."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        return sorted(self._data)


class LocalFileCacheBackend(CacheBackend):
    """One JSON file per key under ``cache_dir``.

    Writes go to a temporary file first and are renamed into place, so a
    reader never sees a half-written value.
    """

    SUFFIX = ".json"

    def __init__(self, cache_dir: Path | str) -> None:
        self._cache_dir = Path(cache_dir)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def _path(self, key: str) -> Path:
        return self._cache_dir / f"{quote(key, safe='')}{self.SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def keys(self) -> list[str]:
        if not self._cache_dir.exists():
            return []
        return sorted(unquote(p.stem) for p in self._cache_dir.glob(f"*{self.SUFFIX}"))
