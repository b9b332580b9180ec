"""Custom load-test metrics and response checks.

``Trend`` tracks a distribution of values (min, max, avg, percentiles) and
``Rate`` tracks the fraction of non-zero samples, which suits pass/fail
ratios. ``check`` evaluates named predicates against a Locust response,
feeds the shared ``checks`` rate and marks the request failed on the first
predicate that does not hold.
"""

import re
from typing import Any, Callable, Dict, List, Mapping

import numpy as np
import structlog

logger = structlog.get_logger("loadtest.metrics")

_PERCENTILE = re.compile(r"^p\((\d+(?:\.\d+)?)\)$")


class Trend:
    """Distribution of observed values, usually milliseconds."""

    def __init__(self, name: str):
        self.name = name
        self.values: List[float] = []

    def add(self, value: float) -> None:
        self.values.append(float(value))

    def aggregate(self, aggregation: str) -> float:
        """Return ``avg``, ``min``, ``max``, ``med``, ``count`` or ``p(N)``."""
        if aggregation == "count":
            return float(len(self.values))
        if not self.values:
            return 0.0
        data = np.asarray(self.values)
        if aggregation == "avg":
            return float(np.mean(data))
        if aggregation == "min":
            return float(np.min(data))
        if aggregation == "max":
            return float(np.max(data))
        if aggregation == "med":
            return float(np.median(data))
        match = _PERCENTILE.match(aggregation)
        if match:
            return float(np.percentile(data, float(match.group(1))))
        raise ValueError(f"Unsupported trend aggregation: {aggregation}")

    def summary(self) -> Dict[str, float]:
        return {key: self.aggregate(key) for key in ("avg", "min", "med", "max", "p(90)", "p(95)")}


class Rate:
    """Fraction of samples that were non-zero."""

    def __init__(self, name: str):
        self.name = name
        self.passes = 0
        self.total = 0

    def add(self, value: Any) -> None:
        self.total += 1
        if value:
            self.passes += 1

    @property
    def rate(self) -> float:
        return self.passes / self.total if self.total else 0.0

    def aggregate(self, aggregation: str) -> float:
        if aggregation == "rate":
            return self.rate
        if aggregation == "count":
            return float(self.total)
        raise ValueError(f"Unsupported rate aggregation: {aggregation}")

    def summary(self) -> Dict[str, float]:
        return {"rate": self.rate, "passes": float(self.passes), "fails": float(self.total - self.passes)}


# Shared across every virtual user in the process.
checks = Rate("checks")


def check(response: Any, predicates: Mapping[str, Callable[[Any], bool]], rate: Rate = checks) -> bool:
    """Evaluate ``predicates`` against ``response``; return True if all pass.

    ``response`` is a Locust response opened with ``catch_response=True``.
    A predicate that cannot read the body (bad JSON, missing key) fails.
    """
    failed = []
    for name, predicate in predicates.items():
        try:
            ok = bool(predicate(response))
        except (ValueError, KeyError, TypeError, IndexError, AttributeError) as e:
            logger.debug("Check raised", check=name, error=str(e))
            ok = False
        rate.add(ok)
        if not ok:
            failed.append(name)

    if failed:
        response.failure(f"Failed checks: {', '.join(failed)}")
        return False
    response.success()
    return True
