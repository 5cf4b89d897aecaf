"""Shared request/validation logic for upstream HTTP providers."""

from __future__ import annotations

import json
from typing import Any

import httpx

from tidewatch.domain.exceptions import FormatError, HttpError, TransportError
from tidewatch.domain.models.fetch_results import FailureKind


def looks_like_markup(body: str, content_type: str | None = None) -> bool:
    """True when a body is an HTML/XML page rather than a JSON document."""
    if content_type and "html" in content_type.lower():
        return True
    return body.lstrip().startswith("<")


class ResilientHttpProvider:
    """One GET round trip with ordered validation.

    ``_get_json`` raises a ``FetchError`` subclass for each failure class:
    transport, non-success status, markup body, unparseable JSON. Subclasses
    extract their field from the returned payload and convert errors into
    ``FetchResult`` values at their public boundary.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        client = await self._get_client()
        try:
            resp = await client.get(path, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        if not resp.is_success:
            raise HttpError(f"HTTP {resp.status_code}", status_code=resp.status_code)

        body = resp.text
        if looks_like_markup(body, resp.headers.get("content-type")):
            raise FormatError(
                "Received markup instead of JSON",
                failure_kind=FailureKind.UNEXPECTED_FORMAT,
                status_code=resp.status_code,
            )

        try:
            return json.loads(body)
        except ValueError as e:
            raise FormatError(
                f"Malformed JSON payload: {e}",
                failure_kind=FailureKind.PARSE,
                status_code=resp.status_code,
            ) from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
