from typing import Any, Dict

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from secret_santa.models.api.sessions import ConversationState, PendingIntent
from secret_santa.models.db.session_model import ConversationSessionModel
from secret_santa.repositories.base_repository import BaseRepository


class SessionRepository(BaseRepository[ConversationSessionModel, ConversationState]):
    """Repository for per-participant conversation state."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ConversationSessionModel, id_field="participant_id")

    async def upsert(self, participant_id: int, values: Dict[str, Any]) -> None:
        """Create the session row if needed and overwrite the given fields."""
        query = (
            insert(self.model_class)
            .values(participant_id=participant_id, **values)
            .on_conflict_do_update(index_elements=["participant_id"], set_=values)
        )
        await self.db.execute(query)
        await self.db.commit()

    async def reset_intent_if(
        self, participant_id: int, expected: PendingIntent
    ) -> int:
        """Reset the pending intent to none if it still equals `expected`."""
        return await self.conditional_update(
            participant_id,
            {"pending_intent": expected.value},
            {"pending_intent": PendingIntent.NONE.value},
        )

    def _to_pydantic(self, db_model: Any) -> ConversationState:
        """Convert SQLAlchemy ConversationSessionModel to ConversationState."""
        return ConversationState(
            participant_id=db_model.participant_id,
            pending_intent=PendingIntent(db_model.pending_intent or "none"),
            last_throttled_at=db_model.last_throttled_at,
        )

    def _from_pydantic(
        self, pydantic_model: ConversationState
    ) -> ConversationSessionModel:
        """Convert ConversationState to SQLAlchemy ConversationSessionModel."""
        return ConversationSessionModel(
            participant_id=pydantic_model.participant_id,
            pending_intent=pydantic_model.pending_intent.value,
            last_throttled_at=pydantic_model.last_throttled_at,
        )
