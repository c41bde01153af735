"""Heartbeat consumer - Feeds the registry from the worker-heartbeat queue."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from pydantic import ValidationError

from buildit.broker import HEARTBEAT_QUEUE, Broker
from buildit.jobs import WorkerHeartbeat

if TYPE_CHECKING:
    from kombu.message import Message

    from buildit.registry.registry import WorkerRegistry

logger = logging.getLogger(__name__)


class HeartbeatConsumer:
    """Records every heartbeat delivery in a WorkerRegistry."""

    def __init__(self, broker_factory: Callable[[], Broker], registry: WorkerRegistry) -> None:
        """Initialize the consumer.

        Args:
            broker_factory: Opens a dedicated broker connection for consuming.
            registry: Registry to update.
        """
        self.broker_factory = broker_factory
        self.registry = registry

    def handle(self, message: Message) -> None:
        """Record one heartbeat and acknowledge it.

        Malformed heartbeats are logged and acknowledged.
        """
        try:
            heartbeat = WorkerHeartbeat.model_validate_json(message.body)
        except ValidationError as e:
            logger.warning("Discarding malformed heartbeat: %s", e)
        else:
            logger.debug("Processing worker heartbeat %s", heartbeat.identifier)
            self.registry.record_heartbeat(heartbeat.identifier)

        message.ack()

    def run(self, stop: threading.Event) -> None:
        """Consume until ``stop`` is set or the connection fails."""
        with self.broker_factory() as broker:
            broker.consume(HEARTBEAT_QUEUE, self.handle, stop)
