"""Feed health reduction over the per-series status map."""

from collections.abc import Mapping

from tidewatch.domain.models.fetch_results import FetchStatus
from tidewatch.domain.models.regime import FeedHealth


def aggregate_feed_health(statuses: Mapping[str, FetchStatus]) -> FeedHealth:
    """Reduce a status map to one health label.

    Unknown when empty, Stable when everything is fresh, Outage when nothing is
    left, Degraded otherwise.
    """
    if not statuses:
        return FeedHealth.UNKNOWN
    values = list(statuses.values())
    if all(status is FetchStatus.OK for status in values):
        return FeedHealth.STABLE
    if all(status is FetchStatus.FAIL for status in values):
        return FeedHealth.OUTAGE
    return FeedHealth.DEGRADED
