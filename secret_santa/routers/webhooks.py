import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from secret_santa.clients.base_transport_client import BaseTransportClient
from secret_santa.clients.telegram_client import TelegramClient
from secret_santa.config import Settings, get_settings
from secret_santa.database import get_db
from secret_santa.models.api.telegram import TelegramUpdate
from secret_santa.services.dispatcher_service import DispatcherService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_transport_client(
    settings: Settings = Depends(get_settings),
) -> BaseTransportClient:
    """Dependency to get the outbound messaging client."""
    return TelegramClient(base_url=settings.telegram_api_url, bot_token=settings.bot_token)


@router.post("/telegram")
async def receive_telegram_update(
    update_data: dict,
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
    client: BaseTransportClient = Depends(get_transport_client),
    settings: Settings = Depends(get_settings),
) -> Dict[str, bool]:
    """
    Handle an incoming update from the Telegram Bot API.
    The secret token header is checked when a webhook secret is configured.
    """
    if (
        settings.webhook_secret
        and x_telegram_bot_api_secret_token != settings.webhook_secret
    ):
        raise HTTPException(status_code=403, detail="Invalid secret token")

    try:
        update = TelegramUpdate.model_validate(update_data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    service = DispatcherService(db, client, settings)

    try:
        await service.handle_update(update)
    except Exception:
        logger.exception("Unexpected error processing update %s", update.update_id)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"ok": True}
