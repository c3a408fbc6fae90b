# SQLAlchemy database models
from .participant_model import ParticipantModel
from .session_model import ConversationSessionModel

__all__ = ["ConversationSessionModel", "ParticipantModel"]
