"""Domain exceptions for Tidewatch."""

from __future__ import annotations

from tidewatch.domain.models.fetch_results import FailureKind


class TidewatchError(Exception):
    """Base exception for all Tidewatch errors."""


class FetchError(TidewatchError):
    """A single upstream request did not yield a usable payload."""

    failure_kind: FailureKind = FailureKind.TRANSPORT

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(FetchError):
    """No response was received (connection, DNS, timeout)."""

    failure_kind = FailureKind.TRANSPORT


class HttpError(FetchError):
    """The upstream answered with a non-success status code."""

    failure_kind = FailureKind.HTTP

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message, status_code=status_code)


class FormatError(FetchError):
    """The body is markup instead of JSON, or JSON that does not parse."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: FailureKind = FailureKind.PARSE,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.failure_kind = failure_kind


class MissingFieldError(FetchError):
    """The payload parsed but lacks the expected field."""

    failure_kind = FailureKind.MISSING_FIELD
