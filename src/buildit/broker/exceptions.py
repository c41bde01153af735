"""Custom exceptions for the broker layer."""


class BrokerError(Exception):
    """Base exception for message broker errors."""


class QueueDeclareError(BrokerError):
    """A queue could not be declared (broker unreachable, permissions, conflict)."""


class PublishError(BrokerError):
    """A message was not confirmed by the broker."""


class ManagementAPIError(BrokerError):
    """The broker management API could not be queried."""
