from sqlalchemy import BigInteger, Column, DateTime, String, func

from secret_santa.database import Base


class ConversationSessionModel(Base):
    """SQLAlchemy model for conversation_sessions table."""

    __tablename__ = "conversation_sessions"

    participant_id = Column(BigInteger, primary_key=True, autoincrement=False)
    pending_intent = Column(String(40), nullable=False, default="none")
    last_throttled_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True), default=func.now(), onupdate=func.now()
    )

    # Constraints (enforced by database CHECK constraints in the migration)
    # pending_intent IN ('none', 'awaiting_wishlist',
    #                    'awaiting_message_to_recipient', 'awaiting_message_to_santa')
