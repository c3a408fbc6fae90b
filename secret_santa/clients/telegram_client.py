import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from secret_santa.clients.base_transport_client import BaseTransportClient


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class TelegramClient(BaseTransportClient):
    """Telegram Bot API client using httpx."""

    def __init__(self, base_url: str, bot_token: str):
        self.base_url = base_url.rstrip("/")
        self.bot_token = bot_token

    def _method_url(self, method: str) -> str:
        return f"{self.base_url}/bot{self.bot_token}/{method}"

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient() as client:
            response = await client.post(self._method_url(method), json=payload)
            response.raise_for_status()
            data: Dict[str, Any] = response.json()

            return data

    async def send_text(self, chat_id: int, text: str) -> Dict[str, Any]:
        """Send a message via sendMessage."""
        return await self._call("sendMessage", {"chat_id": chat_id, "text": text})

    async def send_formatted_text(self, chat_id: int, html: str) -> Dict[str, Any]:
        """Send a message via sendMessage with HTML parse mode."""
        payload = {"chat_id": chat_id, "text": html, "parse_mode": "HTML"}
        return await self._call("sendMessage", payload)

    async def send_image(self, chat_id: int, source: str) -> Dict[str, Any]:
        """Send a photo by URL, or upload it when `source` is a local path."""
        if is_url(source):
            return await self._call("sendPhoto", {"chat_id": chat_id, "photo": source})

        path = Path(source)
        content = await asyncio.to_thread(path.read_bytes)
        async with httpx.AsyncClient() as client:
            response = await client.post(
                self._method_url("sendPhoto"),
                data={"chat_id": str(chat_id)},
                files={"photo": (path.name, content)},
            )
            response.raise_for_status()
            data: Dict[str, Any] = response.json()

            return data

    async def send_sticker(
        self, chat_id: int, sticker: str, reply_to_message_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """Send a sticker via sendSticker."""
        payload: Dict[str, Any] = {"chat_id": chat_id, "sticker": sticker}
        if reply_to_message_id is not None:
            payload["reply_parameters"] = {"message_id": reply_to_message_id}
        return await self._call("sendSticker", payload)

    async def set_webhook(
        self, url: str, secret_token: Optional[str] = None
    ) -> Dict[str, Any]:
        """Register the webhook via setWebhook."""
        payload: Dict[str, Any] = {"url": url, "allowed_updates": ["message"]}
        if secret_token:
            payload["secret_token"] = secret_token
        return await self._call("setWebhook", payload)
