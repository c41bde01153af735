"""Data models for inbound GitHub webhook events."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

from buildit.webhooks.exceptions import CommentParseError


class WebhookUser(BaseModel):
    login: str


class WebhookComment(BaseModel):
    issue_url: str
    user: WebhookUser
    body: str


class WebhookEvent(BaseModel):
    """An ``issue_comment`` event, reduced to the fields the bot reads."""

    comment: WebhookComment

    @property
    def pr_number(self) -> int:
        """Issue number from the last segment of ``issue_url``.

        Raises:
            ValueError: If the URL does not end in a number.
        """
        return int(self.comment.issue_url.rstrip("/").rsplit("/", 1)[-1])


@dataclass(frozen=True)
class BuildCommand:
    """``@bot build [arch,arch]``. Without archs they are derived from the packages."""

    archs: tuple[str, ...] | None = None


def parse_comment_command(body: str, mention: str) -> BuildCommand:
    """Parse a comment addressed to the bot.

    Args:
        body: Comment text.
        mention: The bot mention, e.g. ``@aosc-buildit-bot``.

    Raises:
        CommentParseError: If the comment is not addressed to the bot or is
            not a recognized command.
    """
    if not body.startswith(mention):
        raise CommentParseError("Comment does not mention the bot")
    tokens = body.split()
    if tokens[0] != mention:
        raise CommentParseError("Comment does not mention the bot")

    args = tokens[1:]
    if not args:
        raise CommentParseError("Empty command")
    if args[0] != "build":
        raise CommentParseError(f"Unknown command: {args[0]}")
    if len(args) == 1:
        return BuildCommand()
    if len(args) > 2:
        raise CommentParseError("Usage: build [arch,arch,...]")
    archs = tuple(arch for arch in (a.strip() for a in args[1].split(",")) if arch)
    if not archs:
        raise CommentParseError("Usage: build [arch,arch,...]")
    return BuildCommand(archs=archs)
