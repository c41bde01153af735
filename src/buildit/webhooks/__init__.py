"""Webhook Command Processor - Builds requested in pull request comments."""

from buildit.webhooks.exceptions import CommentParseError, WebhookError
from buildit.webhooks.models import (
    BuildCommand,
    WebhookComment,
    WebhookEvent,
    WebhookUser,
    parse_comment_command,
)
from buildit.webhooks.processor import WebhookProcessor
from buildit.webhooks.retry import (
    ATTEMPT_HEADER,
    DISPATCHED_HEADER,
    MAX_ATTEMPTS,
    DoNotRetry,
    Drop,
    Ok,
    Outcome,
    Retry,
    read_attempt,
    update_retry,
)
from buildit.webhooks.signature import sign, verify_signature

__all__ = [
    "ATTEMPT_HEADER",
    "DISPATCHED_HEADER",
    "MAX_ATTEMPTS",
    "BuildCommand",
    "CommentParseError",
    "DoNotRetry",
    "Drop",
    "Ok",
    "Outcome",
    "Retry",
    "WebhookComment",
    "WebhookError",
    "WebhookEvent",
    "WebhookProcessor",
    "WebhookUser",
    "parse_comment_command",
    "read_attempt",
    "sign",
    "update_retry",
    "verify_signature",
]
