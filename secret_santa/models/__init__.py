# Export all models
from .api import (
    ConversationState,
    Participant,
    PendingIntent,
    TelegramChat,
    TelegramMessage,
    TelegramUpdate,
    TelegramUser,
)
from .db import (
    ConversationSessionModel,
    ParticipantModel,
)

__all__ = [
    # API models
    "Participant",
    "ConversationState",
    "PendingIntent",
    "TelegramChat",
    "TelegramMessage",
    "TelegramUpdate",
    "TelegramUser",
    # DB models
    "ConversationSessionModel",
    "ParticipantModel",
]
