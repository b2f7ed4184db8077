"""
Stateful components owned by the gateway node.
"""

from .metrics_recorder import AggregateMetrics, HopAggregate, MetricsRecorder
from .schemas import AudioHistoryEntry, HistoryEntry, PerformanceSample, TextHistoryEntry
from .session_store import SessionStore


__all__ = [
    "AggregateMetrics",
    "AudioHistoryEntry",
    "HistoryEntry",
    "HopAggregate",
    "MetricsRecorder",
    "PerformanceSample",
    "SessionStore",
    "TextHistoryEntry",
]
