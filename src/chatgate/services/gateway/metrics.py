"""
Prometheus metrics for the gateway service.

These mirror the in-memory MetricsRecorder so the two hops can also be
compared from a Prometheus scrape.
"""

from prometheus_client import Counter, Histogram

from chatgate.telemetry.metrics import get_metric


# Per-hop latency histogram
hop_latency_histogram = get_metric(
    "gateway_hop_latency_seconds",
    Histogram,
    "Elapsed time per hop and message category",
    ["hop", "category"],  # hop=gateway/worker, category=text/audio
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0],
)

# Per-hop payload size histogram
hop_payload_histogram = get_metric(
    "gateway_hop_payload_bytes",
    Histogram,
    "Payload size per hop and message category",
    ["hop", "category"],
    buckets=[64, 256, 1024, 4096, 16384, 65536, 262144, 1048576, 16777216],
)

# Concurrent batch size histogram
batch_size_histogram = get_metric(
    "gateway_batch_size",
    Histogram,
    "Distribution of concurrent batch sizes",
    buckets=[1, 5, 10, 50, 100, 500, 1000],
)

# Error counter by kind
error_counter = get_metric(
    "gateway_errors_total",
    Counter,
    "Total number of client-facing errors by kind",
    ["error_kind"],  # ValidationError, PayloadTooLarge, WorkerUnavailable, ...
)
