"""Data models for the Status Reporter."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class QueueStatus(BaseModel):
    """Job queue of one architecture."""

    arch: str
    queue: str
    waiting: int
    building: int | None = None
    consumers: int


class WorkerState(BaseModel):
    """Last known state of one worker process."""

    hostname: str
    arch: str
    pid: int
    last_heartbeat: datetime
    online: bool


class StatusReport(BaseModel):
    """Point-in-time view of queues and workers."""

    generated_at: datetime
    queues: list[QueueStatus]
    workers: list[WorkerState]
