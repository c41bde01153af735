"""Worker Liveness Registry - Which build workers are alive, fed by heartbeats."""

from buildit.registry.heartbeat import HeartbeatConsumer
from buildit.registry.models import WorkerStatus
from buildit.registry.registry import WorkerRegistry

__all__ = [
    "HeartbeatConsumer",
    "WorkerRegistry",
    "WorkerStatus",
]
