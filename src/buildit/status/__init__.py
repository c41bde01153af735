"""Status Reporter - Queue depth and worker liveness at a glance."""

from buildit.status.models import QueueStatus, StatusReport, WorkerState
from buildit.status.reporter import StatusReporter, render_telegram

__all__ = [
    "QueueStatus",
    "StatusReport",
    "StatusReporter",
    "WorkerState",
    "render_telegram",
]
