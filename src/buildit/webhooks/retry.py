"""Bounded retry of webhook events.

The attempt count travels with the event in a message header. A retryable
failure republishes the event with the count incremented, until the count
reaches ``MAX_ATTEMPTS`` and the event is dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
ATTEMPT_HEADER = "x-buildit-attempt"
# Set once jobs were published, so a retry only repeats the reporting step.
DISPATCHED_HEADER = "x-buildit-dispatched"


@dataclass(frozen=True)
class Ok:
    """Processed; acknowledge."""


@dataclass(frozen=True)
class DoNotRetry:
    """Cannot succeed on redelivery; acknowledge."""

    reason: str


@dataclass(frozen=True)
class Retry:
    """Republish with ``attempt`` in the header, then acknowledge."""

    attempt: int
    reason: str
    dispatched: bool = False


@dataclass(frozen=True)
class Drop:
    """Retries exhausted; acknowledge."""

    reason: str


Outcome = Ok | DoNotRetry | Retry | Drop


def update_retry(attempt: int, reason: str, dispatched: bool = False) -> Retry | Drop:
    """Outcome of a retryable failure at ``attempt`` (0 for the first delivery)."""
    attempt += 1
    if attempt >= MAX_ATTEMPTS:
        return Drop(reason=f"giving up after {attempt} attempts: {reason}")
    return Retry(attempt=attempt, reason=reason, dispatched=dispatched)


def read_attempt(headers: Mapping[str, Any] | None) -> int:
    """Attempt count carried by a delivery; missing or invalid counts as 0."""
    if not headers:
        return 0
    try:
        attempt = int(headers.get(ATTEMPT_HEADER, 0))
    except (TypeError, ValueError):
        logger.warning(
            "Ignoring invalid %s header: %r", ATTEMPT_HEADER, headers.get(ATTEMPT_HEADER)
        )
        return 0
    return max(attempt, 0)


def read_dispatched(headers: Mapping[str, Any] | None) -> bool:
    return bool(headers and headers.get(DISPATCHED_HEADER))


def retry_headers(outcome: Retry) -> dict[str, Any]:
    headers: dict[str, Any] = {ATTEMPT_HEADER: outcome.attempt}
    if outcome.dispatched:
        headers[DISPATCHED_HEADER] = True
    return headers
