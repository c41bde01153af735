"""Custom exceptions for webhook processing."""


class WebhookError(Exception):
    """Base exception for webhook errors."""


class CommentParseError(WebhookError):
    """The comment is not a command for the bot."""
