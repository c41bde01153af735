"""Jobs - Wire models shared by the server and the build workers."""

from buildit.jobs.models import (
    ALL_ARCH,
    HEARTBEAT_TIMEOUT,
    MAINLINE,
    Job,
    JobResult,
    JobSource,
    WorkerHeartbeat,
    WorkerIdentifier,
    job_queue_name,
)

__all__ = [
    "ALL_ARCH",
    "HEARTBEAT_TIMEOUT",
    "MAINLINE",
    "Job",
    "JobResult",
    "JobSource",
    "WorkerHeartbeat",
    "WorkerIdentifier",
    "job_queue_name",
]
