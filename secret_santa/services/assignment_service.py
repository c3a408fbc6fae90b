import logging
import random
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from secret_santa.errors import (
    AlreadyAssignedError,
    ConcurrentAssignmentConflictError,
    NoCandidateAvailableError,
    ParticipantNotFoundError,
)
from secret_santa.models.api.participants import Participant
from secret_santa.repositories.participant_repository import ParticipantRepository

logger = logging.getLogger(__name__)


def pick_random_index(rng: random.Random, size: int) -> int:
    """Pick an index in [0, size - 1], both ends inclusive."""
    return rng.randint(0, size - 1)


class AssignmentService:
    """Selects a gift recipient for a participant and links the pair."""

    def __init__(
        self,
        db: AsyncSession,
        participant_repo: Optional[ParticipantRepository] = None,
        rng: Optional[random.Random] = None,
    ):
        self.db = db
        self.participant_repo = participant_repo or ParticipantRepository(db)
        self.rng = rng or random.Random()

    async def assign_recipient(self, requester_id: int) -> Participant:
        """
        Assign a recipient to the requester:
        1. Reject requesters that already have a recipient
        2. Collect candidates nobody has claimed yet, excluding the requester
        3. Choose one (see choose_candidate)
        4. Claim the candidate and link the requester in one transaction

        Raises ParticipantNotFoundError or an AssignmentError subclass.
        """
        requester = await self.participant_repo.find_by_id(requester_id)
        if requester is None:
            raise ParticipantNotFoundError(requester_id)

        if requester.recipient_id is not None:
            raise AlreadyAssignedError(
                f"Participant {requester_id} already gives to {requester.recipient_id}"
            )

        candidates = await self.participant_repo.find_unclaimed_except(requester_id)
        recipient = self.choose_candidate(candidates)

        await self._commit_pair(requester, recipient)

        logger.info("Participant %s now gives to %s", requester_id, recipient.id)
        return recipient.model_copy(update={"santa_id": requester_id})

    def choose_candidate(self, candidates: List[Participant]) -> Participant:
        """Choose a recipient from unclaimed candidates.

        A single candidate that has not picked a recipient of their own is
        taken deterministically, so isolated participants get matched before
        the pool narrows. Otherwise the pick is uniform over all candidates.
        """
        if not candidates:
            raise NoCandidateAvailableError("No unclaimed participants left")

        unpaired_givers = [c for c in candidates if c.recipient_id is None]
        if len(unpaired_givers) == 1:
            return unpaired_givers[0]

        return candidates[pick_random_index(self.rng, len(candidates))]

    async def _commit_pair(self, requester: Participant, recipient: Participant) -> None:
        # Claim only if nobody else set santa_id since the candidates were read.
        # A parallel request from the same requester that claimed a different
        # candidate trips the unique index on santa_id instead.
        try:
            claimed = await self.participant_repo.conditional_update(
                recipient.id,
                {"santa_id": None},
                {"santa_id": requester.id},
                commit=False,
            )
        except IntegrityError as e:
            await self.participant_repo.rollback()
            raise ConcurrentAssignmentConflictError(
                f"Participant {requester.id} is already claiming another recipient"
            ) from e
        if not claimed:
            await self.participant_repo.rollback()
            raise ConcurrentAssignmentConflictError(
                f"Participant {recipient.id} was claimed concurrently"
            )

        linked = await self.participant_repo.conditional_update(
            requester.id,
            {"recipient_id": None},
            {"recipient_id": recipient.id},
            commit=False,
        )
        if not linked:
            await self.participant_repo.rollback()
            raise AlreadyAssignedError(
                f"Participant {requester.id} was assigned concurrently"
            )

        await self.participant_repo.commit()
