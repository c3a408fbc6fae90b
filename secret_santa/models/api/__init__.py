# API models for domain records and transport payloads
from .participants import Participant
from .sessions import ConversationState, PendingIntent
from .telegram import TelegramChat, TelegramMessage, TelegramUpdate, TelegramUser

__all__ = [
    "Participant",
    "ConversationState",
    "PendingIntent",
    "TelegramChat",
    "TelegramMessage",
    "TelegramUpdate",
    "TelegramUser",
]
