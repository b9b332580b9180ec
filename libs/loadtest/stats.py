"""Adapters from Locust request statistics to threshold metrics.

Locust partitions statistics by the ``name`` each request is tagged with, so
``http_req_duration{name:GET /users}`` maps to the stats entry named
``GET /users``.
"""

from typing import Any, Dict, Iterable, Mapping

from .thresholds import Aggregatable, parse_metric_key


class LatencyMetric:
    """Response-time aggregations (milliseconds) of one Locust stats entry."""

    def __init__(self, entry: Any):
        self.entry = entry

    def aggregate(self, aggregation: str) -> float:
        if aggregation == "avg":
            return float(self.entry.avg_response_time)
        if aggregation == "min":
            return float(self.entry.min_response_time or 0)
        if aggregation == "max":
            return float(self.entry.max_response_time)
        if aggregation == "med":
            return float(self.entry.median_response_time)
        if aggregation == "count":
            return float(self.entry.num_requests)
        if aggregation.startswith("p(") and aggregation.endswith(")"):
            percent = float(aggregation[2:-1]) / 100
            return float(self.entry.get_response_time_percentile(percent))
        raise ValueError(f"Unsupported duration aggregation: {aggregation}")


class FailureRateMetric:
    """Failed-request ratio of one Locust stats entry.

    Includes requests failed by ``check`` as well as HTTP errors.
    """

    def __init__(self, entry: Any):
        self.entry = entry

    def aggregate(self, aggregation: str) -> float:
        if aggregation == "rate":
            return float(self.entry.fail_ratio)
        if aggregation == "count":
            return float(self.entry.num_failures)
        raise ValueError(f"Unsupported failure aggregation: {aggregation}")


def _entries_by_name(stats: Any) -> Dict[str, Any]:
    return {name: entry for (name, _method), entry in stats.entries.items()}


def collect_metrics(
    stats: Any,
    metric_keys: Iterable[str],
    custom: Mapping[str, Aggregatable],
) -> Dict[str, Aggregatable]:
    """Resolve each threshold metric key to something with ``aggregate()``.

    ``stats`` is a Locust ``RequestStats``; ``custom`` holds ``Trend`` and
    ``Rate`` objects keyed by metric name. Keys with no data are left out.
    """
    entries = _entries_by_name(stats)
    resolved: Dict[str, Aggregatable] = {}
    for key in metric_keys:
        metric, tag, tag_value = parse_metric_key(key)
        if metric in custom and tag is None:
            resolved[key] = custom[metric]
            continue

        if tag is None:
            entry = stats.total
        elif tag == "name" and tag_value in entries:
            entry = entries[tag_value]
        else:
            continue

        if metric == "http_req_duration":
            resolved[key] = LatencyMetric(entry)
        elif metric == "http_req_failed":
            resolved[key] = FailureRateMetric(entry)
    return resolved
