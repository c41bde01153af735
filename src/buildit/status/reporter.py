"""StatusReporter - Combines broker queue statistics with the worker registry."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from buildit.broker import ManagementAPIError
from buildit.formatting import escape_markdown, humanize_ago
from buildit.jobs import ALL_ARCH, HEARTBEAT_TIMEOUT, job_queue_name
from buildit.status.models import QueueStatus, StatusReport, WorkerState

if TYPE_CHECKING:
    from buildit.broker import Broker, ManagementClient
    from buildit.registry import WorkerRegistry

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class StatusReporter:
    """Read-only view over job queues and worker liveness."""

    def __init__(
        self,
        broker: Broker,
        registry: WorkerRegistry,
        management: ManagementClient | None = None,
        clock: Callable[[], datetime] = _utc_now,
        timeout: float = HEARTBEAT_TIMEOUT,
    ) -> None:
        """Initialize the reporter.

        Args:
            broker: Broker used to declare job queues and read consumer counts.
            registry: Worker liveness registry.
            management: Optional management API client for in-progress job counts.
            clock: Source of the current time.
            timeout: Seconds without heartbeat after which a worker is offline.
        """
        self.broker = broker
        self.registry = registry
        self.management = management
        self._clock = clock
        self.timeout = timeout

    def _building(self, queue_name: str) -> int | None:
        if self.management is None:
            return None
        try:
            return self.management.unacknowledged(queue_name)
        except ManagementAPIError as e:
            logger.warning("Omitting in-progress job count of %s: %s", queue_name, e)
            return None

    def report(self) -> StatusReport:
        """Collect the current status.

        Raises:
            BrokerError: If the job queues cannot be declared.
        """
        now = self._clock()
        queues = []
        for arch in ALL_ARCH:
            queue_name = job_queue_name(arch)
            handle = self.broker.ensure_queue(queue_name)
            queues.append(
                QueueStatus(
                    arch=arch,
                    queue=queue_name,
                    waiting=handle.message_count,
                    building=self._building(queue_name),
                    consumers=handle.consumer_count,
                )
            )

        workers = [
            WorkerState(
                hostname=identifier.hostname,
                arch=identifier.arch,
                pid=identifier.pid,
                last_heartbeat=status.last_heartbeat,
                online=status.is_online(now, self.timeout),
            )
            for identifier, status in self.registry.snapshot()
        ]
        return StatusReport(generated_at=now, queues=queues, workers=workers)


def render_telegram(report: StatusReport) -> str:
    """Render a status report as Telegram MarkdownV2."""
    res = "__*Queue Status*__\n\n"
    for queue in report.queues:
        building = f"{queue.building} job\\(s\\), " if queue.building is not None else ""
        res += (
            f"*{escape_markdown(queue.arch)}*: {building}"
            f"{queue.consumers} available server\\(s\\)\n"
        )

    res += "\n__*Server Status*__\n\n"
    for worker in report.workers:
        ago = humanize_ago(report.generated_at - worker.last_heartbeat)
        state = f"Online as of {ago}" if worker.online else f"Offline, last seen {ago}"
        res += escape_markdown(f"{worker.hostname} ({worker.arch}): {state}\n")
    return res
