"""Queue names and durable queue declaration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from kombu import Exchange, Queue

from buildit.broker.exceptions import QueueDeclareError

if TYPE_CHECKING:
    from kombu.transport.virtual import Channel

logger = logging.getLogger(__name__)

HEARTBEAT_QUEUE = "worker-heartbeat"
COMPLETION_QUEUE = "job-completion"
WEBHOOK_QUEUE = "github-webhooks"

# Builds can run for hours; the broker must not treat an unacked job as abandoned.
CONSUMER_TIMEOUT_MS = 24 * 3600 * 1000


@dataclass(frozen=True)
class QueueHandle:
    """Result of declaring a queue.

    Attributes:
        name: Queue name.
        message_count: Messages ready for delivery at declaration time.
        consumer_count: Consumers attached at declaration time.
    """

    name: str
    message_count: int
    consumer_count: int


def make_queue(name: str) -> Queue:
    """Build the kombu definition of a durable queue on the default exchange.

    Every publisher and consumer uses this definition so that repeated
    declarations carry identical arguments.
    """
    return Queue(
        name,
        exchange=Exchange(""),
        routing_key=name,
        durable=True,
        auto_delete=False,
        queue_arguments={"x-consumer-timeout": CONSUMER_TIMEOUT_MS},
    )


def ensure_queue(channel: Channel, name: str) -> QueueHandle:
    """Declare a durable queue, or confirm it already exists.

    Args:
        channel: Open broker channel.
        name: Queue name.

    Returns:
        QueueHandle with the broker's current counts.

    Raises:
        QueueDeclareError: If the broker rejects or cannot process the declaration.
    """
    queue = make_queue(name)
    try:
        declared_name, message_count, consumer_count = queue(channel).queue_declare()
    except Exception as e:
        logger.error("Failed to declare queue %s: %s", name, e)
        raise QueueDeclareError(f"Failed to declare queue '{name}': {e}") from e
    return QueueHandle(
        name=declared_name,
        message_count=message_count,
        consumer_count=consumer_count,
    )
