"""TelegramBot - Minimal Telegram Bot API client."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

import httpx

from buildit.chat.exceptions import TelegramError
from buildit.logging import sanitize_for_log

logger = logging.getLogger(__name__)

Update = dict[str, Any]


class Notifier(Protocol):
    """Anything that can deliver a message to a chat."""

    def send_message(self, chat_id: int, text: str, parse_mode: str | None = None) -> None: ...


class TelegramBot:
    """Sends messages and long-polls for updates through the Bot API."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.telegram.org",
        poll_timeout: int = 30,
    ) -> None:
        """Initialize the bot.

        Args:
            token: Bot token from @BotFather.
            base_url: Bot API base URL (for testing/self-hosted servers).
            poll_timeout: Seconds each getUpdates call may wait for updates.
        """
        self._token = token
        self.base_url = base_url.rstrip("/")
        self.poll_timeout = poll_timeout
        # Next update to request; confirms everything before it to Telegram
        self.offset: int | None = None
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the Bot API."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=f"{self.base_url}/bot{self._token}",
                timeout=self.poll_timeout + 10.0,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _call(self, method: str, **params: Any) -> Any:
        payload = {key: value for key, value in params.items() if value is not None}
        try:
            response = self.client.post(f"/{method}", json=payload)
        except httpx.HTTPError as e:
            raise TelegramError(f"Telegram {method} failed: {sanitize_for_log(str(e))}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise TelegramError(
                f"Telegram {method} failed: {response.status_code} - invalid response"
            ) from e
        if not data.get("ok"):
            raise TelegramError(
                f"Telegram {method} failed: {data.get('description', response.status_code)}"
            )
        return data.get("result")

    def get_me(self) -> dict[str, Any]:
        """Get the bot's own user object."""
        return self._call("getMe")

    def send_message(self, chat_id: int, text: str, parse_mode: str | None = None) -> None:
        """Send a text message.

        Raises:
            TelegramError: If Telegram rejects the message.
        """
        logger.debug("Sending message to chat %d", chat_id)
        self._call("sendMessage", chat_id=chat_id, text=text, parse_mode=parse_mode)

    def get_updates(self, offset: int | None = None, timeout: int | None = None) -> list[Update]:
        """Long-poll for new updates.

        Args:
            offset: First update id to return; earlier updates are confirmed.
            timeout: Seconds to wait; defaults to ``poll_timeout``.
        """
        return self._call(
            "getUpdates",
            offset=offset,
            timeout=self.poll_timeout if timeout is None else timeout,
            allowed_updates=["message"],
        )

    def run_polling(self, handler: Callable[[Update], None], stop: threading.Event) -> None:
        """Feed updates to ``handler`` until ``stop`` is set.

        The offset is kept on the bot, so a restart after a failed poll
        does not hand already handled updates out again.

        Raises:
            TelegramError: If polling fails; the supervisor restarts us.
        """
        logger.info("Polling Telegram for updates")
        while not stop.is_set():
            for update in self.get_updates(self.offset):
                self.offset = update["update_id"] + 1
                handler(update)
        logger.info("Stopped polling Telegram")
