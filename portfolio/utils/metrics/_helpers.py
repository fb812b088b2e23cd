"""
Helper for Prometheus metric registration.

Re-importing a metrics module (uvicorn --reload, test collection) would
otherwise fail with a duplicate timeseries error, so existing collectors
are looked up in the registry instead.
"""

from typing import Any, TypeVar

from prometheus_client import REGISTRY, Counter, Gauge, Histogram

MetricT = TypeVar("MetricT", Counter, Gauge, Histogram)


def _get_or_create(
    metric_cls: type[MetricT],
    name: str,
    doc: str,
    labels: list[str] | None = None,
    **kwargs: Any,
) -> MetricT:
    """
    Get an existing metric of ``name`` or create a new one.

    Args:
        metric_cls: Counter, Gauge or Histogram.
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.
        **kwargs: Extra constructor arguments (e.g. histogram buckets).

    Returns:
        Metric instance.
    """
    try:
        return metric_cls(name, doc, labels or [], **kwargs)
    except ValueError:
        # Counters are registered without their "_total" suffix
        key = name.removesuffix("_total")
        return REGISTRY._names_to_collectors.get(
            key, REGISTRY._names_to_collectors.get(name)
        )
