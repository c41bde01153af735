"""Chat front end - Telegram bot commands for starting builds and reading status."""

from buildit.chat.bot import Notifier, TelegramBot
from buildit.chat.commands import (
    BuildCommand,
    Command,
    HelpCommand,
    PullRequestCommand,
    StatusCommand,
    parse_command,
)
from buildit.chat.exceptions import ChatError, CommandParseError, TelegramError
from buildit.chat.handlers import ChatHandler, Reply

__all__ = [
    "BuildCommand",
    "ChatError",
    "ChatHandler",
    "Command",
    "CommandParseError",
    "HelpCommand",
    "Notifier",
    "PullRequestCommand",
    "Reply",
    "StatusCommand",
    "TelegramBot",
    "TelegramError",
    "parse_command",
]
