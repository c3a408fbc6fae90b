from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PendingIntent(str, Enum):
    """How the next free-text message from a participant should be read."""

    NONE = "none"
    AWAITING_WISHLIST = "awaiting_wishlist"
    AWAITING_MESSAGE_TO_RECIPIENT = "awaiting_message_to_recipient"
    AWAITING_MESSAGE_TO_SANTA = "awaiting_message_to_santa"


class ConversationState(BaseModel):
    """Ephemeral per-participant conversation state."""

    participant_id: int
    pending_intent: PendingIntent = PendingIntent.NONE
    last_throttled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
