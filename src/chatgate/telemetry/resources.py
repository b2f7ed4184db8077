"""
Process resource snapshots for health reporting and the memory gauge.
"""

from dataclasses import asdict, dataclass
import time
from typing import Any

import psutil

from .metrics import memory_gauge


@dataclass
class ResourceSnapshot:
    """
    Snapshot of process resource usage at a point in time.
    """

    timestamp: float
    rss: int  # Resident Set Size - physical memory
    vms: int  # Virtual Memory Size
    memory_percent: float  # Percentage of system memory
    memory_mb: float  # RSS in megabytes for convenience

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def get_resource_snapshot() -> ResourceSnapshot:
    process = psutil.Process()
    mem_info = process.memory_info()

    return ResourceSnapshot(
        timestamp=time.time(),
        rss=mem_info.rss,
        vms=mem_info.vms,
        memory_percent=process.memory_percent(),
        memory_mb=mem_info.rss / (1024 * 1024),
    )


def record_memory_usage(node: int, service: str) -> ResourceSnapshot:
    """Push current memory stats to the Prometheus gauge and return them."""
    snapshot = get_resource_snapshot()
    labels = {"node": str(node), "service": service}
    memory_gauge.labels(**labels, type="rss").set(snapshot.rss)
    memory_gauge.labels(**labels, type="vms").set(snapshot.vms)
    memory_gauge.labels(**labels, type="percent").set(snapshot.memory_percent)
    return snapshot
