from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from secret_santa.models.api.sessions import ConversationState, PendingIntent
from secret_santa.repositories.session_repository import SessionRepository


class ConversationStateService:
    """Tracks which follow-up message each participant is expected to send.

    State lives in the store, keyed by participant id, and rows are created
    lazily on first write.
    """

    def __init__(
        self, db: AsyncSession, session_repo: Optional[SessionRepository] = None
    ):
        self.db = db
        self.session_repo = session_repo or SessionRepository(db)

    async def get_state(self, participant_id: int) -> ConversationState:
        state = await self.session_repo.get_by_id(participant_id)
        return state or ConversationState(participant_id=participant_id)

    async def set_pending_intent(
        self, participant_id: int, intent: PendingIntent
    ) -> None:
        """Overwrite the pending intent; an unanswered previous one is dropped."""
        await self.session_repo.upsert(
            participant_id, {"pending_intent": intent.value}
        )

    async def consume_pending_intent(self, participant_id: int) -> PendingIntent:
        """Return the pending intent and reset it to none.

        The reset is a compare-and-set on the stored value, so when two
        messages race for the same intent only one of them gets it.
        """
        state = await self.session_repo.get_by_id(participant_id)
        if state is None or state.pending_intent == PendingIntent.NONE:
            return PendingIntent.NONE

        matched = await self.session_repo.reset_intent_if(
            participant_id, state.pending_intent
        )
        return state.pending_intent if matched else PendingIntent.NONE

    async def is_throttled(
        self, participant_id: int, now: datetime, cooldown: timedelta
    ) -> bool:
        """Check whether the rate-limited action is still cooling down."""
        state = await self.session_repo.get_by_id(participant_id)
        if state is None or state.last_throttled_at is None:
            return False
        return not (now - state.last_throttled_at > cooldown)

    async def record_throttle_event(self, participant_id: int, now: datetime) -> None:
        await self.session_repo.upsert(participant_id, {"last_throttled_at": now})

    async def try_throttled_action(
        self, participant_id: int, now: datetime, cooldown: timedelta
    ) -> bool:
        """Record the action at `now` if the cooldown allows it.

        Returns True when the action is allowed.
        """
        if await self.is_throttled(participant_id, now, cooldown):
            return False
        await self.record_throttle_event(participant_id, now)
        return True
