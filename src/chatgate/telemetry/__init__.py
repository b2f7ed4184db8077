"""
Telemetry utilities for the chat gateway and its workers.
"""

from .metrics import (
    error_counter,
    memory_gauge,
    request_counter,
    rpc_duration_histogram,
)
from .resources import ResourceSnapshot, get_resource_snapshot, record_memory_usage
from .tracing import instrument_fastapi_app, setup_tracing, shutdown_tracing


__all__ = [
    "ResourceSnapshot",
    "error_counter",
    "get_resource_snapshot",
    "instrument_fastapi_app",
    "memory_gauge",
    "record_memory_usage",
    "request_counter",
    "rpc_duration_histogram",
    "setup_tracing",
    "shutdown_tracing",
]
