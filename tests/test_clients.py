from pathlib import Path
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from secret_santa.clients.base_transport_client import BaseTransportClient
from secret_santa.clients.telegram_client import TelegramClient, is_url


def mock_http_client(response_data: Dict[str, Any]) -> AsyncMock:
    mock_response = MagicMock()
    mock_response.json.return_value = response_data
    mock_response.raise_for_status.return_value = None

    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    mock_client.__aexit__.return_value = None
    mock_client.post.return_value = mock_response
    return mock_client


class TestBaseTransportClient:
    """Unit tests for BaseTransportClient abstract base class."""

    def test_base_transport_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            BaseTransportClient()  # type: ignore

    def test_incomplete_subclass_cannot_be_instantiated(self) -> None:
        class TextOnlyTransport(BaseTransportClient):
            async def send_text(self, chat_id: int, text: str) -> Dict[str, Any]:
                return {"ok": True}

        with pytest.raises(TypeError):
            TextOnlyTransport()  # type: ignore


class TestTelegramClient:
    """Unit tests for TelegramClient."""

    @pytest.fixture
    def telegram(self) -> TelegramClient:
        return TelegramClient(base_url="https://telegram.test/", bot_token="123:abc")

    def test_method_url(self, telegram: TelegramClient) -> None:
        assert (
            telegram._method_url("sendMessage")
            == "https://telegram.test/bot123:abc/sendMessage"
        )

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("https://example.com/cat.jpg", True),
            ("http://example.com/cat.jpg", True),
            ("images/cat.jpg", False),
        ],
    )
    def test_is_url(self, source: str, expected: bool) -> None:
        assert is_url(source) is expected

    @pytest.mark.asyncio
    async def test_send_text(self, telegram: TelegramClient) -> None:
        response_data = {"ok": True, "result": {"message_id": 1}}

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_http_client(response_data)
            mock_client_class.return_value = mock_client

            result = await telegram.send_text(42, "hello")

            assert result == response_data
            mock_client.post.assert_called_once_with(
                "https://telegram.test/bot123:abc/sendMessage",
                json={"chat_id": 42, "text": "hello"},
            )

    @pytest.mark.asyncio
    async def test_send_formatted_text(self, telegram: TelegramClient) -> None:
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_http_client({"ok": True})
            mock_client_class.return_value = mock_client

            await telegram.send_formatted_text(42, "<b>hi</b>")

            payload = mock_client.post.call_args[1]["json"]
            assert payload == {"chat_id": 42, "text": "<b>hi</b>", "parse_mode": "HTML"}

    @pytest.mark.asyncio
    async def test_send_image_by_url(self, telegram: TelegramClient) -> None:
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_http_client({"ok": True})
            mock_client_class.return_value = mock_client

            await telegram.send_image(42, "https://example.com/cat.jpg")

            call_args = mock_client.post.call_args
            assert call_args[0][0].endswith("/sendPhoto")
            assert call_args[1]["json"] == {
                "chat_id": 42,
                "photo": "https://example.com/cat.jpg",
            }

    @pytest.mark.asyncio
    async def test_send_image_uploads_local_file(
        self, telegram: TelegramClient, tmp_path: Path
    ) -> None:
        image = tmp_path / "violet.jpg"
        image.write_bytes(b"\xff\xd8\xff")

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_http_client({"ok": True})
            mock_client_class.return_value = mock_client

            await telegram.send_image(42, str(image))

            call_args = mock_client.post.call_args
            assert call_args[0][0].endswith("/sendPhoto")
            assert call_args[1]["data"] == {"chat_id": "42"}
            assert call_args[1]["files"] == {"photo": ("violet.jpg", b"\xff\xd8\xff")}

    @pytest.mark.parametrize(
        "reply_to,expected_extra",
        [(None, {}), (7, {"reply_parameters": {"message_id": 7}})],
    )
    @pytest.mark.asyncio
    async def test_send_sticker(
        self,
        telegram: TelegramClient,
        reply_to: Optional[int],
        expected_extra: Dict[str, Any],
    ) -> None:
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_http_client({"ok": True})
            mock_client_class.return_value = mock_client

            await telegram.send_sticker(42, "sticker-id", reply_to_message_id=reply_to)

            payload = mock_client.post.call_args[1]["json"]
            assert payload == {"chat_id": 42, "sticker": "sticker-id", **expected_extra}

    @pytest.mark.asyncio
    async def test_set_webhook_with_secret(self, telegram: TelegramClient) -> None:
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_http_client({"ok": True, "result": True})
            mock_client_class.return_value = mock_client

            await telegram.set_webhook("https://santa.test/api/webhooks/telegram", "s3cret")

            call_args = mock_client.post.call_args
            assert call_args[0][0].endswith("/setWebhook")
            assert call_args[1]["json"] == {
                "url": "https://santa.test/api/webhooks/telegram",
                "allowed_updates": ["message"],
                "secret_token": "s3cret",
            }

    @pytest.mark.asyncio
    async def test_http_error_propagates(self, telegram: TelegramClient) -> None:
        """Failed sends are not retried and surface to the caller."""
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Forbidden", request=MagicMock(), response=MagicMock(status_code=403)
        )

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_http_client({})
            mock_client.post.return_value = mock_response
            mock_client_class.return_value = mock_client

            with pytest.raises(httpx.HTTPStatusError):
                await telegram.send_text(42, "hello")

            mock_client.post.assert_called_once()
