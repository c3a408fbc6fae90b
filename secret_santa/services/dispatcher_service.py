import asyncio
import html
import logging
import random
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from secret_santa import replies
from secret_santa.clients.base_transport_client import BaseTransportClient
from secret_santa.config import Settings
from secret_santa.errors import (
    AlreadyAssignedError,
    AssignmentError,
    ParticipantNotFoundError,
    UnauthorizedError,
)
from secret_santa.models.api.participants import Participant
from secret_santa.models.api.sessions import PendingIntent
from secret_santa.models.api.telegram import TelegramMessage, TelegramUpdate
from secret_santa.repositories.participant_repository import ParticipantRepository
from secret_santa.repositories.session_repository import SessionRepository
from secret_santa.services.assignment_service import (
    AssignmentService,
    pick_random_index,
)
from secret_santa.services.conversation_state_service import ConversationStateService

logger = logging.getLogger(__name__)

CAT_PATTERN = re.compile(r"кот|cat", re.IGNORECASE)
CAT_IMAGE_URL = "https://thiscatdoesnotexist.com/?{timestamp}"


@dataclass
class InboundContext:
    """Normalized view of an inbound text message."""

    participant_id: int
    chat_id: int
    message_id: int
    is_private: bool
    text: str
    first_name: str = ""
    last_name: str = ""
    username: Optional[str] = None

    @classmethod
    def from_message(cls, message: TelegramMessage) -> "InboundContext":
        sender = message.from_user
        if sender is not None:
            participant_id = sender.id
            first_name = sender.first_name
            last_name = sender.last_name or ""
            username = sender.username
        else:
            participant_id = message.chat.id
            first_name = message.chat.first_name or ""
            last_name = message.chat.last_name or ""
            username = message.chat.username

        return cls(
            participant_id=participant_id,
            chat_id=message.chat.id,
            message_id=message.message_id,
            is_private=message.is_private,
            text=message.text or "",
            first_name=first_name,
            last_name=last_name,
            username=username,
        )


def parse_command(text: str) -> Optional[str]:
    """Extract the command name from '/name@bot args', lowercased."""
    if not text.startswith("/"):
        return None
    token = text.split(maxsplit=1)[0][1:]
    name = token.split("@", 1)[0].lower()
    return name or None


def render_member_list(participants: List[Participant]) -> str:
    lines = [replies.MEMBERS_HEADER]
    for index, participant in enumerate(participants, start=1):
        line = f"{index}. {participant.display_name}"
        if participant.has_wish_list:
            line += f" {replies.WISHLIST_MARKER}"
        if participant.recipient_id is not None:
            line += f" {replies.ASSIGNED_MARKER}"
        lines.append(line)
    return "\n".join(lines)


def render_member_dump(participants: List[Participant]) -> str:
    lines = [replies.MEMBERS_HEADER]
    for index, participant in enumerate(participants, start=1):
        lines.append(f"{index}. {participant.display_name} id: {participant.id}")
    return "\n".join(lines)


Handler = Callable[[InboundContext], Awaitable[None]]
TextHandler = Callable[[InboundContext], Awaitable[bool]]


class DispatcherService:
    """Routes inbound messages to commands and free-text handlers."""

    def __init__(
        self,
        db: AsyncSession,
        client: BaseTransportClient,
        settings: Settings,
        participant_repo: Optional[ParticipantRepository] = None,
        session_repo: Optional[SessionRepository] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.client = client
        self.settings = settings
        self.rng = rng or random.Random()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.participant_repo = participant_repo or ParticipantRepository(db)
        self.state_service = ConversationStateService(db, session_repo)
        self.assignment_service = AssignmentService(
            db, self.participant_repo, self.rng
        )

        # name -> (handler, private chats only)
        self.commands: Dict[str, Tuple[Handler, bool]] = {
            "start": (self.handle_start, False),
            "getmembers": (self.handle_get_members, False),
            "resetdata": (self.handle_reset_data, True),
            "getdata": (self.handle_get_data, True),
            "setwishlist": (self.handle_set_wishlist, True),
            "sendtorecipient": (self.handle_send_to_recipient, True),
            "sendtosanta": (self.handle_send_to_santa, True),
            "takerecipient": (self.handle_take_recipient, True),
        }

        # Evaluated in order until one handler reports a match
        self.text_handlers: List[Tuple[str, TextHandler]] = [
            ("pending_intent", self.handle_pending_intent),
            ("pattern_image", self.handle_pattern_image),
            ("novelty_sticker", self.handle_novelty_sticker),
            ("private_fallback", self.handle_private_fallback),
        ]

        self.intent_handlers: Dict[PendingIntent, Handler] = {
            PendingIntent.AWAITING_WISHLIST: self.receive_wishlist,
            PendingIntent.AWAITING_MESSAGE_TO_RECIPIENT: self.relay_to_recipient,
            PendingIntent.AWAITING_MESSAGE_TO_SANTA: self.relay_to_santa,
        }

        self.image_patterns: List[Tuple[re.Pattern, Callable[[], str]]] = []
        if settings.image_trigger_pattern and settings.image_trigger_source:
            source = settings.image_trigger_source
            trigger = re.compile(settings.image_trigger_pattern, re.IGNORECASE)
            self.image_patterns.append((trigger, lambda: source))
        self.image_patterns.append((CAT_PATTERN, self.cat_image_url))

    async def handle_update(self, update: TelegramUpdate) -> Optional[str]:
        """
        Dispatch one inbound update:
        1. Ignore updates without a text message
        2. Run a known command, honoring its private-chat restriction
        3. Otherwise run the free-text handler chain

        Returns the name of the command or text handler that ran, if any.
        """
        message = update.message
        if message is None or message.text is None:
            return None

        ctx = InboundContext.from_message(message)
        command = parse_command(ctx.text)
        if command in self.commands:
            handler, private_only = self.commands[command]
            if private_only and not ctx.is_private:
                logger.debug("Ignoring /%s outside a private chat", command)
                return None
            await handler(ctx)
            return command

        return await self.handle_text(ctx)

    async def handle_text(self, ctx: InboundContext) -> Optional[str]:
        for name, handler in self.text_handlers:
            if await handler(ctx):
                return name
        return None

    # Commands

    async def handle_start(self, ctx: InboundContext) -> None:
        if ctx.is_private:
            await self.register(ctx)
        await self.state_service.set_pending_intent(
            ctx.participant_id, PendingIntent.NONE
        )

        await self.client.send_text(ctx.chat_id, replies.GREETING)
        await self.client.send_text(ctx.chat_id, replies.MEMBERS_HINT)
        if ctx.is_private:
            await self.client.send_text(ctx.chat_id, replies.WISHLIST_HINT)
            await self.client.send_text(ctx.chat_id, replies.TAKE_RECIPIENT_HINT)

    async def register(self, ctx: InboundContext) -> bool:
        """Create the participant on first contact and announce them.

        Returns True when a new participant was created.
        """
        participant = Participant(
            id=ctx.participant_id,
            first_name=ctx.first_name,
            last_name=ctx.last_name,
            username=ctx.username,
        )
        created = await self.participant_repo.create_if_absent(participant)
        if not created:
            return False

        logger.info("Registered participant %s", participant.id)
        await self.notify_all(participant)
        return True

    async def notify_all(self, new_participant: Participant) -> None:
        """Send a join notice to every other participant."""
        participants = await self.participant_repo.find_all()
        others = [p for p in participants if p.id != new_participant.id]
        text = replies.JOIN_NOTICE.format(name=new_participant.display_name)

        results = await asyncio.gather(
            *(self.client.send_text(p.id, text) for p in others),
            return_exceptions=True,
        )
        for participant, result in zip(others, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Failed to send join notice to %s: %s", participant.id, result
                )

    async def handle_get_members(self, ctx: InboundContext) -> None:
        participants = await self.participant_repo.find_all()
        await self.client.send_text(ctx.chat_id, render_member_list(participants))

    def _require_admin(self, ctx: InboundContext) -> None:
        if not self.settings.is_admin(ctx.participant_id):
            raise UnauthorizedError(f"Participant {ctx.participant_id} is not an admin")

    async def handle_reset_data(self, ctx: InboundContext) -> None:
        try:
            self._require_admin(ctx)
        except UnauthorizedError as e:
            # Non-admins get no reply at all
            logger.info("Ignoring /resetdata: %s", e)
            return

        deleted = await self.participant_repo.delete_all()
        logger.warning("Admin %s deleted %d participants", ctx.participant_id, deleted)
        await self.client.send_text(ctx.chat_id, replies.DATA_CLEARED)

    async def handle_get_data(self, ctx: InboundContext) -> None:
        try:
            self._require_admin(ctx)
        except UnauthorizedError as e:
            logger.info("Ignoring /getdata: %s", e)
            return

        participants = await self.participant_repo.find_all()
        await self.client.send_text(ctx.chat_id, render_member_dump(participants))

    async def handle_set_wishlist(self, ctx: InboundContext) -> None:
        await self.state_service.set_pending_intent(
            ctx.participant_id, PendingIntent.AWAITING_WISHLIST
        )
        await self.client.send_text(ctx.chat_id, replies.WISHLIST_PROMPT)

    async def handle_send_to_recipient(self, ctx: InboundContext) -> None:
        await self.state_service.set_pending_intent(
            ctx.participant_id, PendingIntent.AWAITING_MESSAGE_TO_RECIPIENT
        )
        await self.client.send_text(ctx.chat_id, replies.RECIPIENT_MESSAGE_PROMPT)

    async def handle_send_to_santa(self, ctx: InboundContext) -> None:
        await self.state_service.set_pending_intent(
            ctx.participant_id, PendingIntent.AWAITING_MESSAGE_TO_SANTA
        )
        await self.client.send_text(ctx.chat_id, replies.SANTA_MESSAGE_PROMPT)

    async def handle_take_recipient(self, ctx: InboundContext) -> None:
        try:
            recipient = await self.assignment_service.assign_recipient(
                ctx.participant_id
            )
        except ParticipantNotFoundError:
            await self.client.send_text(ctx.chat_id, replies.SOMETHING_WENT_WRONG)
            return
        except AlreadyAssignedError:
            await self.client.send_text(ctx.chat_id, replies.ALREADY_ASSIGNED)
            return
        except AssignmentError as e:
            logger.info("Assignment for %s failed: %s", ctx.participant_id, e)
            await self.client.send_text(ctx.chat_id, replies.TRY_AGAIN)
            return

        await self.client.send_text(
            ctx.chat_id, replies.RECIPIENT_ASSIGNED.format(name=recipient.display_name)
        )
        if recipient.wish_list:
            await self.client.send_formatted_text(
                ctx.chat_id,
                replies.RECIPIENT_WISHLIST.format(
                    wish_list=html.escape(recipient.wish_list)
                ),
            )
        else:
            await self.client.send_text(ctx.chat_id, replies.RECIPIENT_NO_WISHLIST)

    # Free-text handlers

    async def handle_pending_intent(self, ctx: InboundContext) -> bool:
        if not ctx.is_private:
            return False

        intent = await self.state_service.consume_pending_intent(ctx.participant_id)
        handler = self.intent_handlers.get(intent)
        if handler is None:
            return False

        await handler(ctx)
        return True

    async def handle_pattern_image(self, ctx: InboundContext) -> bool:
        for pattern, source in self.image_patterns:
            if pattern.search(ctx.text):
                await self.client.send_image(ctx.chat_id, source())
                return True
        return False

    async def handle_novelty_sticker(self, ctx: InboundContext) -> bool:
        if not self.settings.is_privileged(ctx.participant_id):
            return False
        if not self.settings.novelty_stickers:
            return False

        allowed = await self.state_service.try_throttled_action(
            ctx.participant_id, self.clock(), self.settings.novelty_cooldown
        )
        if not allowed:
            return False

        stickers = self.settings.novelty_stickers
        sticker = stickers[pick_random_index(self.rng, len(stickers))]
        await self.client.send_sticker(
            ctx.chat_id, sticker, reply_to_message_id=ctx.message_id
        )
        return True

    async def handle_private_fallback(self, ctx: InboundContext) -> bool:
        if not ctx.is_private:
            return False
        await self.client.send_image(ctx.chat_id, self.cat_image_url())
        return True

    def cat_image_url(self) -> str:
        timestamp = int(self.clock().timestamp() * 1000)
        return CAT_IMAGE_URL.format(timestamp=timestamp)

    # Follow-ups for pending intents

    def _usable_text(self, ctx: InboundContext) -> Optional[str]:
        return ctx.text if ctx.text.strip() else None

    async def receive_wishlist(self, ctx: InboundContext) -> None:
        participant = await self.participant_repo.find_by_id(ctx.participant_id)
        text = self._usable_text(ctx)
        if participant is None or text is None:
            await self.client.send_text(ctx.chat_id, replies.SOMETHING_WENT_WRONG)
            return

        await self.participant_repo.update_by_id(participant.id, {"wish_list": text})
        await self.client.send_text(ctx.chat_id, replies.WISHLIST_SAVED)

        # The list is already saved, so a failed notice only gets logged
        if participant.santa_id is not None:
            await self.forward(
                participant.santa_id, replies.WISHLIST_CHANGED_NOTICE, text
            )

    async def relay_to_recipient(self, ctx: InboundContext) -> None:
        participant = await self.participant_repo.find_by_id(ctx.participant_id)
        text = self._usable_text(ctx)
        if participant is None or text is None:
            await self.client.send_text(ctx.chat_id, replies.SOMETHING_WENT_WRONG)
            return

        if participant.recipient_id is None:
            await self.client.send_text(ctx.chat_id, replies.NO_RECIPIENT)
            return

        delivered = await self.forward(
            participant.recipient_id, replies.RECIPIENT_MESSAGE_NOTICE, text
        )
        await self.client.send_text(
            ctx.chat_id,
            replies.MESSAGE_RELAYED if delivered else replies.SOMETHING_WENT_WRONG,
        )

    async def relay_to_santa(self, ctx: InboundContext) -> None:
        participant = await self.participant_repo.find_by_id(ctx.participant_id)
        text = self._usable_text(ctx)
        if participant is None or text is None:
            await self.client.send_text(ctx.chat_id, replies.SOMETHING_WENT_WRONG)
            return

        if participant.santa_id is None:
            await self.client.send_text(ctx.chat_id, replies.NO_SANTA)
            return

        delivered = await self.forward(
            participant.santa_id, replies.SANTA_MESSAGE_NOTICE, text
        )
        await self.client.send_text(
            ctx.chat_id,
            replies.MESSAGE_RELAYED if delivered else replies.SOMETHING_WENT_WRONG,
        )

    async def forward(self, target_id: int, notice: str, text: str) -> bool:
        """Send a notice followed by the text to another participant.

        Returns False when the transport rejects the send, e.g. because the
        target blocked the bot.
        """
        try:
            await self.client.send_text(target_id, notice)
            await self.client.send_text(target_id, text)
        except httpx.HTTPError as e:
            logger.warning("Failed to forward a message to %s: %s", target_id, e)
            return False
        return True
