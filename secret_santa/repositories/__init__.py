# Repository classes for database operations
from .base_repository import BaseRepository
from .participant_repository import ParticipantRepository
from .session_repository import SessionRepository

__all__ = [
    "BaseRepository",
    "ParticipantRepository",
    "SessionRepository",
]
