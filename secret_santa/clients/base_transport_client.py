from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BaseTransportClient(ABC):
    """Abstract base class for outbound messaging transports."""

    @abstractmethod
    async def send_text(self, chat_id: int, text: str) -> Dict[str, Any]:
        """Send a plain text message and return the raw transport response."""

    @abstractmethod
    async def send_formatted_text(self, chat_id: int, html: str) -> Dict[str, Any]:
        """Send an HTML formatted message.

        Callers are responsible for escaping any user-provided text in `html`.
        """

    @abstractmethod
    async def send_image(self, chat_id: int, source: str) -> Dict[str, Any]:
        """Send an image given either a URL or a local file path."""

    @abstractmethod
    async def send_sticker(
        self, chat_id: int, sticker: str, reply_to_message_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """Send a sticker, optionally as a reply to an earlier message."""

    @abstractmethod
    async def set_webhook(
        self, url: str, secret_token: Optional[str] = None
    ) -> Dict[str, Any]:
        """Register the URL inbound updates are delivered to."""
