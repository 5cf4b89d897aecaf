"""Display helpers for metric values."""

from tidewatch.domain.models.fetch_results import FetchStatus
from tidewatch.domain.models.regime import FeedHealth, Regime

MISSING = "—"

STATUS_STYLES = {
    FetchStatus.OK: "green",
    FetchStatus.CACHE: "yellow",
    FetchStatus.FAIL: "red",
}

HEALTH_STYLES = {
    FeedHealth.UNKNOWN: "dim",
    FeedHealth.STABLE: "green",
    FeedHealth.DEGRADED: "yellow",
    FeedHealth.OUTAGE: "bold red",
}

REGIME_STYLES = {
    Regime.RISK_ON: "bold green",
    Regime.NEUTRAL: "bold yellow",
    Regime.RISK_OFF: "bold red",
}


def format_number(value: float | None, digits: int = 2) -> str:
    if value is None:
        return MISSING
    return f"{value:,.{digits}f}"


def format_percent(value: float | None, digits: int = 2) -> str:
    if value is None:
        return MISSING
    return f"{value:,.{digits}f}%"


def format_price(value: float | None) -> str:
    if value is None:
        return MISSING
    return f"${value:,.2f}"


def direction_arrow(value: float | None) -> str:
    if value is None:
        return ""
    if value > 0:
        return "↑"
    if value < 0:
        return "↓"
    return "→"


def sparkline(values: list[float] | None) -> str:
    """Compact block-character trend of ``values``."""
    if not values:
        return ""
    blocks = "▁▂▃▄▅▆▇█"
    low, high = min(values), max(values)
    if high == low:
        return blocks[3] * len(values)
    scale = (len(blocks) - 1) / (high - low)
    return "".join(blocks[int(round((v - low) * scale))] for v in values)
