"""Data models for the Worker Liveness Registry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from buildit.jobs import HEARTBEAT_TIMEOUT


@dataclass
class WorkerStatus:
    """Registry entry for one worker process.

    Attributes:
        last_heartbeat: When the most recent heartbeat was received.
    """

    last_heartbeat: datetime

    def is_online(self, now: datetime, timeout: float = HEARTBEAT_TIMEOUT) -> bool:
        """Whether the worker has been heard from within ``timeout`` seconds."""
        return now - self.last_heartbeat <= timedelta(seconds=timeout)
