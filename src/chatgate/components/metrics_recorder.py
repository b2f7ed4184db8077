"""
Rolling performance samples for the two hops.

Samples are kept for the life of the process and averaged on demand;
nothing is cached between snapshots.
"""

from dataclasses import dataclass
import logging
import threading

from chatgate.enums import Hop, MessageKind

from .schemas import PerformanceSample


logger = logging.getLogger(__name__)

NO_DATA = "No data"


@dataclass(frozen=True)
class HopAggregate:
    avg_response_time_ms: float
    avg_payload_size: float
    sample_count: int


@dataclass(frozen=True)
class AggregateMetrics:
    """Averages per (category, hop), computed from the full sample history."""

    values: dict[MessageKind, dict[Hop, HopAggregate]]

    def get(self, category: MessageKind, hop: Hop) -> HopAggregate:
        return self.values[category][hop]

    def speed_improvement(self, category: MessageKind) -> str:
        """
        Ratio of the gateway-hop average to the worker-hop average.

        Returns "No data" instead of dividing by a zero worker average.
        """
        gateway = self.get(category, Hop.GATEWAY)
        worker = self.get(category, Hop.WORKER)
        if worker.sample_count == 0 or worker.avg_response_time_ms <= 0:
            return NO_DATA
        ratio = gateway.avg_response_time_ms / worker.avg_response_time_ms
        return f"Worker hop is {ratio:.2f}x faster"


def _aggregate(samples: list[PerformanceSample]) -> HopAggregate:
    if not samples:
        return HopAggregate(avg_response_time_ms=0.0, avg_payload_size=0.0, sample_count=0)
    count = len(samples)
    return HopAggregate(
        avg_response_time_ms=sum(s.elapsed_ms for s in samples) / count,
        avg_payload_size=sum(s.payload_size_bytes for s in samples) / count,
        sample_count=count,
    )


class MetricsRecorder:
    """
    Append-only store of PerformanceSample per (category, hop).
    """

    def __init__(self) -> None:
        self._samples: dict[MessageKind, dict[Hop, list[PerformanceSample]]] = {
            kind: {hop: [] for hop in Hop} for kind in MessageKind
        }
        self._lock = threading.Lock()

    def record(self, category: MessageKind, hop: Hop, sample: PerformanceSample) -> None:
        with self._lock:
            self._samples[category][hop].append(sample)

    def record_exchange(
        self,
        category: MessageKind,
        gateway_sample: PerformanceSample,
        worker_sample: PerformanceSample,
    ) -> None:
        """Record both hops of one exchange under a single lock acquisition."""
        with self._lock:
            self._samples[category][Hop.GATEWAY].append(gateway_sample)
            self._samples[category][Hop.WORKER].append(worker_sample)

    def snapshot(self) -> AggregateMetrics:
        with self._lock:
            copied = {
                kind: {hop: list(samples) for hop, samples in by_hop.items()}
                for kind, by_hop in self._samples.items()
            }

        return AggregateMetrics(
            values={
                kind: {hop: _aggregate(samples) for hop, samples in by_hop.items()}
                for kind, by_hop in copied.items()
            }
        )

    def sample_count(self, category: MessageKind, hop: Hop) -> int:
        with self._lock:
            return len(self._samples[category][hop])

    def reset(self) -> None:
        with self._lock:
            for by_hop in self._samples.values():
                for samples in by_hop.values():
                    samples.clear()
        logger.info("Performance samples cleared")
