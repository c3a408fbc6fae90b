from sqlalchemy import BigInteger, Column, DateTime, String, Text, func

from secret_santa.database import Base


class ParticipantModel(Base):
    """SQLAlchemy model for participants table."""

    __tablename__ = "participants"

    # Identifier assigned by the messaging transport
    id = Column(BigInteger, primary_key=True, autoincrement=False)
    first_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=False, default="")
    username = Column(String(255))
    wish_list = Column(Text)
    recipient_id = Column(BigInteger, nullable=True, default=None)
    santa_id = Column(BigInteger, nullable=True, default=None)
    created_at = Column(DateTime(timezone=True), default=func.now())
