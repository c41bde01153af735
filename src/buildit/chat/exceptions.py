"""Custom exceptions for the chat front end."""


class ChatError(Exception):
    """Base exception for chat errors."""


class TelegramError(ChatError):
    """The Telegram Bot API call failed or was rejected."""


class CommandParseError(ChatError):
    """The message is addressed to the bot but is not a valid command.

    The message text is suitable as a reply to the user.
    """
