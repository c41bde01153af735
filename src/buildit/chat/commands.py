"""Strict parser for bot commands.

Each command is a closed variant; arguments are validated during parsing, so
handlers never see a half-formed request.
"""

from __future__ import annotations

from dataclasses import dataclass

from buildit.chat.exceptions import CommandParseError


@dataclass(frozen=True)
class HelpCommand:
    """Show the command list."""


@dataclass(frozen=True)
class BuildCommand:
    """Build packages from a git ref on the given architectures."""

    git_ref: str
    packages: tuple[str, ...]
    archs: tuple[str, ...]


@dataclass(frozen=True)
class PullRequestCommand:
    """Build the packages listed in a pull request."""

    number: int


@dataclass(frozen=True)
class StatusCommand:
    """Show queue and worker status."""


Command = HelpCommand | BuildCommand | PullRequestCommand | StatusCommand

COMMAND_DESCRIPTIONS: tuple[tuple[str, str], ...] = (
    ("/help", "Display usage: /help"),
    (
        "/build",
        "Start a build job: /build [git-ref] [packages] [archs] "
        "(e.g., /build stable bash,fish amd64)",
    ),
    ("/pr", "Start a build job from GitHub PR: /pr [pr-number] (e.g., /pr 12345)"),
    ("/status", "Show queue and server status: /status"),
)


def help_text() -> str:
    return "These commands are supported:\n\n" + "\n".join(
        f"{name} - {description}" for name, description in COMMAND_DESCRIPTIONS
    )


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(item for item in (part.strip() for part in value.split(",")) if item)


def _parse_build(args: list[str]) -> BuildCommand:
    if len(args) != 3:
        raise CommandParseError(
            "Got invalid job description. Usage: /build [git-ref] [packages] [archs]"
        )
    git_ref, packages, archs = args
    package_list = _split_list(packages)
    arch_list = _split_list(archs)
    if not package_list or not arch_list:
        raise CommandParseError(
            "Got invalid job description. Usage: /build [git-ref] [packages] [archs]"
        )
    return BuildCommand(git_ref=git_ref, packages=package_list, archs=arch_list)


def _parse_pr(args: list[str]) -> PullRequestCommand:
    if len(args) != 1:
        raise CommandParseError("Usage: /pr [pr-number]")
    try:
        number = int(args[0].lstrip("#"))
    except ValueError as e:
        raise CommandParseError(f"Got invalid pr number: {args[0]}") from e
    if number <= 0:
        raise CommandParseError(f"Got invalid pr number: {args[0]}")
    return PullRequestCommand(number=number)


def _parse_no_args(name: str, args: list[str], command: Command) -> Command:
    if args:
        raise CommandParseError(f"/{name} takes no arguments")
    return command


def parse_command(text: str, bot_username: str | None = None) -> Command | None:
    """Parse a chat message.

    Args:
        text: Message text.
        bot_username: The bot's username; ``/cmd@other_bot`` is then ignored.

    Returns:
        The command, or None if the message is not a command for this bot.

    Raises:
        CommandParseError: If the message is a command for this bot but malformed.
    """
    tokens = text.strip().split()
    if not tokens or not tokens[0].startswith("/"):
        return None

    name, _, addressee = tokens[0][1:].partition("@")
    if addressee and bot_username is not None and addressee.lower() != bot_username.lower():
        return None
    name = name.lower()
    args = tokens[1:]

    if name == "help":
        return _parse_no_args(name, args, HelpCommand())
    if name == "build":
        return _parse_build(args)
    if name == "pr":
        return _parse_pr(args)
    if name == "status":
        return _parse_no_args(name, args, StatusCommand())
    raise CommandParseError(f"Unknown command: /{name}. Use /help to list commands.")
