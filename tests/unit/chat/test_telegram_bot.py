"""Unit tests for TelegramBot."""

import threading
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from buildit.chat import TelegramBot, TelegramError

TOKEN = "123456:ABCdefGhIJKlmNoPQRstuVWxyz012345678"


def _response(data: Any, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = data
    return response


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock HTTP client."""
    return MagicMock()


@pytest.fixture
def bot(mock_client: MagicMock) -> TelegramBot:
    """Create a TelegramBot with mocked HTTP client."""
    b = TelegramBot(TOKEN)
    b._client = mock_client
    return b


@pytest.mark.unit
class TestTelegramBot:
    """Tests for TelegramBot."""

    def test_client_base_url_carries_token(self) -> None:
        b = TelegramBot(TOKEN, base_url="https://tg.example/")
        try:
            assert str(b.client.base_url) == f"https://tg.example/bot{TOKEN}/"
        finally:
            b.close()

    def test_send_message(self, bot: TelegramBot, mock_client: MagicMock) -> None:
        """sendMessage is called with the chat, text and parse mode."""
        mock_client.post.return_value = _response({"ok": True, "result": {}})

        bot.send_message(42, "*hi*", parse_mode="MarkdownV2")

        mock_client.post.assert_called_once_with(
            "/sendMessage", json={"chat_id": 42, "text": "*hi*", "parse_mode": "MarkdownV2"}
        )

    def test_none_params_dropped(self, bot: TelegramBot, mock_client: MagicMock) -> None:
        mock_client.post.return_value = _response({"ok": True, "result": {}})

        bot.send_message(42, "plain")

        assert mock_client.post.call_args.kwargs["json"] == {"chat_id": 42, "text": "plain"}

    def test_api_error(self, bot: TelegramBot, mock_client: MagicMock) -> None:
        """ok: false raises TelegramError with the description."""
        mock_client.post.return_value = _response(
            {"ok": False, "description": "Bad Request: chat not found"}, status_code=400
        )

        with pytest.raises(TelegramError, match="chat not found"):
            bot.send_message(42, "hi")

    def test_network_error_hides_token(self, bot: TelegramBot, mock_client: MagicMock) -> None:
        """Transport errors never leak the bot token."""
        mock_client.post.side_effect = httpx.ConnectError(
            f"failed to reach https://api.telegram.org/bot{TOKEN}/sendMessage"
        )

        with pytest.raises(TelegramError) as exc_info:
            bot.send_message(42, "hi")

        assert TOKEN not in str(exc_info.value)

    def test_invalid_json(self, bot: TelegramBot, mock_client: MagicMock) -> None:
        response = _response(None, status_code=502)
        response.json.side_effect = ValueError("not json")
        mock_client.post.return_value = response

        with pytest.raises(TelegramError, match="502"):
            bot.get_me()

    def test_get_updates(self, bot: TelegramBot, mock_client: MagicMock) -> None:
        """getUpdates long-polls for messages only."""
        mock_client.post.return_value = _response({"ok": True, "result": []})

        assert bot.get_updates(offset=10) == []
        assert mock_client.post.call_args.kwargs["json"] == {
            "offset": 10,
            "timeout": 30,
            "allowed_updates": ["message"],
        }

    def test_run_polling_advances_offset(self, bot: TelegramBot, mock_client: MagicMock) -> None:
        """Each update is handled and confirmed by the next offset."""
        stop = threading.Event()
        handled = []

        def handler(update: dict) -> None:
            handled.append(update["update_id"])
            if update["update_id"] == 8:
                stop.set()

        mock_client.post.side_effect = [
            _response({"ok": True, "result": [{"update_id": 7}]}),
            _response({"ok": True, "result": [{"update_id": 8}]}),
        ]

        bot.run_polling(handler, stop)

        assert handled == [7, 8]
        offsets = [c.kwargs["json"].get("offset") for c in mock_client.post.call_args_list]
        assert offsets == [None, 8]

    def test_restart_after_failed_poll_keeps_offset(
        self, bot: TelegramBot, mock_client: MagicMock
    ) -> None:
        """An update handled before a poll failure is not handled again after restart."""
        stop = threading.Event()
        handled = []

        def handler(update: dict) -> None:
            handled.append(update["update_id"])
            if len(handled) == 2:
                stop.set()

        mock_client.post.side_effect = [
            _response({"ok": True, "result": [{"update_id": 1}]}),
            httpx.ConnectError("connection reset"),
            _response({"ok": True, "result": [{"update_id": 2}]}),
        ]

        with pytest.raises(TelegramError):
            bot.run_polling(handler, stop)
        bot.run_polling(handler, stop)

        assert handled == [1, 2]
        offsets = [c.kwargs["json"].get("offset") for c in mock_client.post.call_args_list]
        assert offsets == [None, 2, 2]
        assert bot.offset == 3
