from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

PRIVATE_CHAT = "private"


class TelegramUser(BaseModel):
    """Sender of a Telegram message."""

    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None


class TelegramChat(BaseModel):
    """Chat a Telegram message was posted in."""

    id: int
    type: str  # 'private', 'group', 'supergroup' or 'channel'
    title: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None


class TelegramMessage(BaseModel):
    """Subset of the Telegram Message object used by the bot."""

    message_id: int
    date: int
    chat: TelegramChat
    from_user: Optional[TelegramUser] = Field(default=None, alias="from")
    text: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_private(self) -> bool:
        return self.chat.type == PRIVATE_CHAT


class TelegramUpdate(BaseModel):
    """Incoming update delivered to the webhook."""

    update_id: int
    message: Optional[TelegramMessage] = None
