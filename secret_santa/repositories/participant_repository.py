from typing import Any, List, Optional

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from secret_santa.models.api.participants import Participant
from secret_santa.models.db.participant_model import ParticipantModel
from secret_santa.repositories.base_repository import BaseRepository


class ParticipantRepository(BaseRepository[ParticipantModel, Participant]):
    """Repository for participant operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ParticipantModel)

    async def find_by_id(self, participant_id: int) -> Optional[Participant]:
        return await self.get_by_id(participant_id)

    async def find_all(self) -> List[Participant]:
        """Get all participants in registration order."""
        query = select(self.model_class).order_by(
            self.model_class.created_at, self.model_class.id
        )
        result = await self.db.execute(query)
        db_models = result.scalars().all()
        return [self._to_pydantic(db_model) for db_model in db_models]

    async def find_unclaimed_except(self, participant_id: int) -> List[Participant]:
        """Get participants nobody gives a gift to yet, excluding one participant."""
        query = (
            select(self.model_class)
            .where(
                self.model_class.santa_id.is_(None),
                self.model_class.id != participant_id,
            )
            .order_by(self.model_class.created_at, self.model_class.id)
        )
        result = await self.db.execute(query)
        db_models = result.scalars().all()
        return [self._to_pydantic(db_model) for db_model in db_models]

    async def create_if_absent(self, participant: Participant) -> bool:
        """Insert a participant unless one with the same ID exists.

        Returns True when a new record was created.
        """
        query = (
            insert(self.model_class)
            .values(
                id=participant.id,
                first_name=participant.first_name,
                last_name=participant.last_name,
                username=participant.username,
                wish_list=participant.wish_list,
            )
            .on_conflict_do_nothing(index_elements=["id"])
        )
        result = await self.db.execute(query)
        await self.db.commit()
        return bool(result.rowcount)

    def _to_pydantic(self, db_model: Any) -> Participant:
        """Convert SQLAlchemy ParticipantModel to Pydantic Participant."""
        return Participant(
            id=db_model.id,
            first_name=db_model.first_name or "",
            last_name=db_model.last_name or "",
            username=db_model.username,
            wish_list=db_model.wish_list,
            recipient_id=db_model.recipient_id,
            santa_id=db_model.santa_id,
            created_at=db_model.created_at,
        )

    def _from_pydantic(self, pydantic_model: Participant) -> ParticipantModel:
        """Convert Pydantic Participant to SQLAlchemy ParticipantModel."""
        return ParticipantModel(
            id=pydantic_model.id,
            first_name=pydantic_model.first_name,
            last_name=pydantic_model.last_name,
            username=pydantic_model.username,
            wish_list=pydantic_model.wish_list,
            recipient_id=pydantic_model.recipient_id,
            santa_id=pydantic_model.santa_id,
        )
