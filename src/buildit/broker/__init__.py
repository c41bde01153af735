"""Broker - Durable queues, publishing and supervised consumers over AMQP."""

from buildit.broker.connection import Broker, MessageHandler
from buildit.broker.consumer import RESTART_BACKOFF, start_supervised, supervise
from buildit.broker.exceptions import (
    BrokerError,
    ManagementAPIError,
    PublishError,
    QueueDeclareError,
)
from buildit.broker.management import ManagementClient
from buildit.broker.queues import (
    COMPLETION_QUEUE,
    CONSUMER_TIMEOUT_MS,
    HEARTBEAT_QUEUE,
    WEBHOOK_QUEUE,
    QueueHandle,
    ensure_queue,
    make_queue,
)

__all__ = [
    "COMPLETION_QUEUE",
    "CONSUMER_TIMEOUT_MS",
    "HEARTBEAT_QUEUE",
    "RESTART_BACKOFF",
    "WEBHOOK_QUEUE",
    "Broker",
    "BrokerError",
    "ManagementAPIError",
    "ManagementClient",
    "MessageHandler",
    "PublishError",
    "QueueDeclareError",
    "QueueHandle",
    "ensure_queue",
    "make_queue",
    "start_supervised",
    "supervise",
]
