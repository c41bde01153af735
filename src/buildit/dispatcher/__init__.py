"""Job Dispatcher - Fans build requests out into per-architecture jobs."""

from buildit.dispatcher.dispatcher import JobDispatcher, normalize_archs, normalize_packages
from buildit.dispatcher.exceptions import DispatchError, InvalidBuildRequestError

__all__ = [
    "DispatchError",
    "InvalidBuildRequestError",
    "JobDispatcher",
    "normalize_archs",
    "normalize_packages",
]
