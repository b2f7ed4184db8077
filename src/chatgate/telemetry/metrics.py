"""
Prometheus metrics shared by every node.

All metrics are exposed via the /metrics endpoint on each node.
"""

from collections.abc import Sequence
from typing import Any, TypeVar, cast

from prometheus_client import REGISTRY, Counter, Gauge, Histogram


MetricType = Counter | Gauge | Histogram
T = TypeVar("T", bound=MetricType)


def get_metric(
    name: str,
    type_cls: type[T],
    documentation: str,
    labelnames: Sequence[str] = (),
    buckets: Sequence[float] | None = None,
) -> T:
    """
    Get an existing metric or create a new one.
    This prevents 'Duplicated timeseries' errors when reloading modules or running tests.
    """
    if name in REGISTRY._names_to_collectors:
        return cast("T", REGISTRY._names_to_collectors[name])

    kwargs = {}
    if buckets and type_cls is Histogram:
        kwargs["buckets"] = buckets
    return cast("T", type_cls(name, documentation, labelnames, **cast("Any", kwargs)))


# === Request Metrics ===

request_counter = get_metric(
    "chatgate_requests_total",
    Counter,
    "Total number of requests handled",
    ["node", "service", "operation", "status"],  # status=success/error
)

error_counter = get_metric(
    "chatgate_errors_total",
    Counter,
    "Total number of errors by kind",
    ["node", "service", "error_kind"],
)

# === RPC Metrics ===

rpc_duration_histogram = get_metric(
    "chatgate_rpc_duration_seconds",
    Histogram,
    "Duration of binary RPC calls from the gateway to workers",
    ["target_service", "method"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0],
)

# === Resource Metrics ===

memory_gauge = get_metric(
    "chatgate_memory_bytes",
    Gauge,
    "Current memory usage in bytes",
    ["node", "service", "type"],  # type=rss/vms/percent
)
