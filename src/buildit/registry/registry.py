"""WorkerRegistry - In-memory map of worker identity to last heartbeat."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from buildit.jobs import WorkerIdentifier
from buildit.registry.models import WorkerStatus

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class WorkerRegistry:
    """Tracks when each worker was last heard from.

    Entries are created on the first heartbeat and updated on every later
    one; they are never removed. Staleness is decided when reading, against
    a liveness threshold. Nothing is persisted: after a restart the registry
    refills within one heartbeat interval.

    All access goes through one lock. Readers get copies.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        """Initialize the registry.

        Args:
            clock: Source of the current time.
        """
        self._clock = clock
        self._lock = threading.Lock()
        self._workers: dict[WorkerIdentifier, WorkerStatus] = {}

    def record_heartbeat(
        self, identifier: WorkerIdentifier, now: datetime | None = None
    ) -> datetime:
        """Insert or update a worker, stamping it with the arrival time.

        Args:
            identifier: The worker heard from.
            now: Arrival time; defaults to the registry clock.

        Returns:
            The recorded arrival time.
        """
        if now is None:
            now = self._clock()
        with self._lock:
            status = self._workers.get(identifier)
            if status is None:
                self._workers[identifier] = WorkerStatus(last_heartbeat=now)
                logger.info(
                    "New worker %s (%s) pid %d",
                    identifier.hostname,
                    identifier.arch,
                    identifier.pid,
                )
            else:
                status.last_heartbeat = now
        return now

    def snapshot(self) -> list[tuple[WorkerIdentifier, WorkerStatus]]:
        """Consistent copy of all entries, ordered by worker identifier."""
        with self._lock:
            entries = [(ident, replace(status)) for ident, status in self._workers.items()]
        entries.sort(key=lambda entry: entry[0])
        return entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._workers)
