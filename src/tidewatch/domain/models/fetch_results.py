"""Fetch result data models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class FetchStatus(str, Enum):
    """Provenance of the data currently held for a series."""

    OK = "OK"
    CACHE = "CACHE"
    FAIL = "FAIL"


class FailureKind(str, Enum):
    """Classification of a failed fetch."""

    TRANSPORT = "transport"
    HTTP = "http"
    UNEXPECTED_FORMAT = "unexpected_format"
    PARSE = "parse"
    MISSING_FIELD = "missing_field"


class FetchResult(BaseModel, Generic[T]):
    """Result of one upstream request with success/error handling."""

    success: bool = Field(..., description="Whether the fetch produced a validated payload")
    data: T | None = Field(default=None, description="Validated payload")
    error: str | None = Field(default=None, description="Error message if the fetch failed")
    failure_kind: FailureKind | None = Field(default=None, description="Failure class")
    status_code: int | None = Field(default=None, description="HTTP status code, if any")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")

    @classmethod
    def ok(cls, data: Any, **metadata: Any) -> FetchResult[Any]:
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def failure(
        cls,
        kind: FailureKind,
        error: str,
        *,
        status_code: int | None = None,
        **metadata: Any,
    ) -> FetchResult[Any]:
        return cls(
            success=False,
            error=error,
            failure_kind=kind,
            status_code=status_code,
            metadata=metadata,
        )
