import logging
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from secret_santa.models.api.participants import Participant
from secret_santa.repositories.participant_repository import ParticipantRepository

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Repairs half-written giver/recipient links left in the store."""

    def __init__(
        self, db: AsyncSession, participant_repo: Optional[ParticipantRepository] = None
    ):
        self.db = db
        self.participant_repo = participant_repo or ParticipantRepository(db)

    async def reconcile(self) -> int:
        """
        Make recipient_id and santa_id agree for every pair:
        1. A santa_id whose santa has no recipient is completed on the santa side
        2. A santa_id whose santa gives to someone else, or is gone, is cleared
        3. A recipient_id whose recipient has no santa is completed on that side
        4. A recipient_id whose recipient has another santa, or is gone, is cleared

        Returns the number of repaired records.
        """
        participants: Dict[int, Participant] = {
            p.id: p for p in await self.participant_repo.find_all()
        }
        repairs = 0

        for participant in participants.values():
            if participant.santa_id is None:
                continue
            santa = participants.get(participant.santa_id)
            if santa is not None and santa.recipient_id is None:
                logger.warning(
                    "Linking santa %s to recipient %s", santa.id, participant.id
                )
                santa.recipient_id = participant.id
                await self.participant_repo.update_by_id(
                    santa.id, {"recipient_id": participant.id}, commit=False
                )
                repairs += 1
            elif santa is None or santa.recipient_id != participant.id:
                logger.warning(
                    "Clearing orphaned santa %s of participant %s",
                    participant.santa_id,
                    participant.id,
                )
                participant.santa_id = None
                await self.participant_repo.update_by_id(
                    participant.id, {"santa_id": None}, commit=False
                )
                repairs += 1

        for participant in participants.values():
            if participant.recipient_id is None:
                continue
            recipient = participants.get(participant.recipient_id)
            if recipient is not None and recipient.santa_id is None:
                logger.warning(
                    "Linking recipient %s to santa %s", recipient.id, participant.id
                )
                recipient.santa_id = participant.id
                await self.participant_repo.update_by_id(
                    recipient.id, {"santa_id": participant.id}, commit=False
                )
                repairs += 1
            elif recipient is None or recipient.santa_id != participant.id:
                logger.warning(
                    "Clearing orphaned recipient %s of participant %s",
                    participant.recipient_id,
                    participant.id,
                )
                participant.recipient_id = None
                await self.participant_repo.update_by_id(
                    participant.id, {"recipient_id": None}, commit=False
                )
                repairs += 1

        if repairs:
            await self.participant_repo.commit()
        logger.info("Reconciliation finished with %d repairs", repairs)
        return repairs
