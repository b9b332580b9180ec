"""Pass/fail thresholds for a load-test run.

Thresholds are plain configuration: a mapping from a metric key to a list of
expressions such as ``"p(95)<500"`` or ``"rate>0.95"``. A metric key may
carry a tag filter, ``http_req_duration{name:GET /users}``, selecting the
per-endpoint series. Evaluation happens once, after the run.

``http_req_failed`` is read from Locust's ``fail_ratio``. Locust counts a
request as failed both on an HTTP error and when ``check`` marks it failed,
so this rate also includes requests that returned successfully but failed a
body check. It is therefore never lower than the HTTP-only error rate.
"""

import operator
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import structlog

logger = structlog.get_logger("loadtest.thresholds")

_EXPRESSION = re.compile(r"^\s*(?P<agg>[a-z]+(?:\(\d+(?:\.\d+)?\))?)\s*(?P<op><=|>=|==|!=|<|>)\s*(?P<value>-?\d+(?:\.\d+)?)\s*$")
_METRIC_KEY = re.compile(r"^(?P<metric>[A-Za-z_][A-Za-z0-9_]*)(?:\{(?P<tag>[^:}]+):(?P<tag_value>[^}]+)\})?$")

_OPERATORS: Dict[str, Callable[[float, float], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
}

DEFAULT_THRESHOLDS: Dict[str, List[str]] = {
    # Global thresholds
    "http_req_duration": ["p(95)<500"],
    "http_req_failed": ["rate<0.05"],
    "checks": ["rate>0.95"],

    # Per-endpoint thresholds
    "http_req_duration{name:GET /users}": ["p(95)<300"],
    "http_req_duration{name:GET /users/:id}": ["p(95)<200"],
    "http_req_duration{name:POST /users}": ["p(95)<500"],
    "http_req_duration{name:PUT /users/:id}": ["p(95)<400"],
    "http_req_duration{name:DELETE /users/:id}": ["p(95)<300"],

    # Custom metrics
    "user_list_duration": ["p(95)<400"],
    "user_creation_success": ["rate>0.90"],
}


class Aggregatable(Protocol):
    def aggregate(self, aggregation: str) -> float: ...


@dataclass(frozen=True)
class Threshold:
    """One parsed threshold expression bound to a metric key."""
    metric_key: str
    aggregation: str
    op: str
    value: float

    @property
    def expression(self) -> str:
        return f"{self.aggregation}{self.op}{self.value:g}"

    def holds(self, observed: float) -> bool:
        return _OPERATORS[self.op](observed, self.value)


@dataclass(frozen=True)
class ThresholdResult:
    threshold: Threshold
    observed: Optional[float]
    passed: bool


def parse_metric_key(metric_key: str) -> Tuple[str, Optional[str], Optional[str]]:
    """Split ``metric{tag:value}`` into ``(metric, tag, value)``."""
    match = _METRIC_KEY.match(metric_key.strip())
    if not match:
        raise ValueError(f"Invalid metric key: {metric_key!r}")
    tag = match.group("tag")
    tag_value = match.group("tag_value")
    return match.group("metric"), tag.strip() if tag else None, tag_value.strip() if tag_value else None


def parse_threshold(metric_key: str, expression: str) -> Threshold:
    """Parse ``"p(95)<500"`` style expressions."""
    parse_metric_key(metric_key)
    match = _EXPRESSION.match(expression)
    if not match:
        raise ValueError(f"Invalid threshold expression for {metric_key}: {expression!r}")
    return Threshold(
        metric_key=metric_key,
        aggregation=match.group("agg"),
        op=match.group("op"),
        value=float(match.group("value")),
    )


def parse_thresholds(config: Mapping[str, Sequence[str]]) -> List[Threshold]:
    return [parse_threshold(key, expr) for key, expressions in config.items() for expr in expressions]


def evaluate_thresholds(
    thresholds: Sequence[Threshold],
    metrics: Mapping[str, Aggregatable],
) -> List[ThresholdResult]:
    """Evaluate thresholds against the collected metrics.

    A threshold whose metric never produced a series counts as failed.
    """
    results = []
    for threshold in thresholds:
        metric = metrics.get(threshold.metric_key)
        if metric is None:
            logger.warning("No data for threshold metric", metric=threshold.metric_key)
            results.append(ThresholdResult(threshold, None, False))
            continue
        observed = metric.aggregate(threshold.aggregation)
        results.append(ThresholdResult(threshold, observed, threshold.holds(observed)))
    return results


def report(results: Sequence[ThresholdResult]) -> bool:
    """Log each result; return True when every threshold passed."""
    all_passed = True
    for result in results:
        log = logger.info if result.passed else logger.error
        log(
            "Threshold passed" if result.passed else "Threshold breached",
            metric=result.threshold.metric_key,
            threshold=result.threshold.expression,
            observed=result.observed,
        )
        all_passed = all_passed and result.passed
    return all_passed
