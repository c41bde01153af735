"""Exceptions for the Job Dispatcher."""


class DispatchError(Exception):
    """Base exception for dispatch errors.

    Raised when any job of a request could not be published. Some jobs of the
    same request may already be on their queues.
    """


class InvalidBuildRequestError(DispatchError):
    """The request names no packages or an unsupported architecture."""
