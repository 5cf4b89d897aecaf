"""Observation parsing and point-in-time helpers.

Every helper is total: empty, short or entirely invalid input yields ``None``
(or an empty list) instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pandas as pd  # type: ignore[import-untyped]
import structlog

from tidewatch.domain.models.macro import Observation

logger = structlog.get_logger(__name__)

YOY_PERIODS = 12
THREE_MONTH_PERIODS = 3


def parse_observations(records: Iterable[Any]) -> list[Observation]:
    """Build an ordered observation sequence from raw upstream records.

    Records are mappings carrying ``date`` (FRED) or ``timestamp`` plus ``value``.
    Records without a timestamp are dropped. A repeated timestamp replaces the
    earlier record. ISO date strings sort chronologically; numeric (epoch)
    timestamps sort by value.
    """
    by_timestamp: dict[str, Observation] = {}
    skipped = 0
    for record in records:
        if not isinstance(record, Mapping):
            skipped += 1
            continue
        timestamp = record.get("date") or record.get("timestamp")
        if not timestamp:
            skipped += 1
            continue
        by_timestamp[str(timestamp)] = Observation(
            timestamp=str(timestamp), value=record.get("value")
        )

    if skipped:
        logger.debug("Skipped malformed observation records", skipped=skipped)

    return [by_timestamp[key] for key in sorted(by_timestamp, key=_timestamp_order)]


def _timestamp_order(timestamp: str) -> tuple[int, float, str]:
    """Numeric timestamps order by value; ISO dates order lexically after them."""
    try:
        number = float(timestamp)
    except ValueError:
        return (1, 0.0, timestamp)
    if not math.isfinite(number):
        return (1, 0.0, timestamp)
    return (0, number, timestamp)


def _as_float(observation: Observation) -> float | None:
    if observation.value is None:
        return None
    number = float(observation.value)
    return number if math.isfinite(number) else None


def _numeric(observations: Sequence[Observation]) -> pd.Series:
    """Float series aligned with ``observations``; NaN marks no observation."""
    return pd.Series([_as_float(obs) for obs in observations], dtype="float64")


def period_change(observations: Sequence[Observation] | None, periods: int) -> float | None:
    """Percent change between the last point and the point ``periods`` back.

    Positional: assumes regular spacing, so gaps in the upstream calendar
    shift the comparison base.
    """
    if not observations or periods < 1 or len(observations) < periods + 1:
        return None

    values = _numeric(observations)
    last = values.iloc[-1]
    base = values.iloc[-(periods + 1)]
    if pd.isna(last) or pd.isna(base) or base == 0:
        return None
    return float((last - base) / base * 100.0)


def year_over_year_change(observations: Sequence[Observation] | None) -> float | None:
    """Percent change over 12 periods (monthly cadence). Needs 13 points."""
    return period_change(observations, YOY_PERIODS)


def three_month_change(observations: Sequence[Observation] | None) -> float | None:
    return period_change(observations, THREE_MONTH_PERIODS)


def latest_valid_value(observations: Sequence[Observation] | None) -> float | None:
    """Most recent numeric value, skipping trailing missing points."""
    if not observations:
        return None
    valid = _numeric(observations).dropna()
    if valid.empty:
        return None
    return float(valid.iloc[-1])


def trailing_window(observations: Sequence[Observation] | None, n: int) -> list[float] | None:
    """Up to the last ``n`` numeric values, oldest first.

    Returns None only when ``observations`` itself is None; a present but
    fully invalid sequence gives an empty list.
    """
    if observations is None:
        return None
    if n <= 0 or not observations:
        return []
    valid = _numeric(observations).dropna()
    return [float(v) for v in valid.tail(n)]
