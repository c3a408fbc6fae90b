import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import Depends, FastAPI
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from secret_santa.clients.telegram_client import TelegramClient
from secret_santa.config import settings
from secret_santa.database import AsyncSessionLocal, close_db, get_db
from secret_santa.routers.webhooks import router as webhooks_router
from secret_santa.services.reconciliation_service import ReconciliationService

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def reconcile_assignments() -> int:
    """Repair giver/recipient links left half-written by an interrupted run."""
    async with AsyncSessionLocal() as session:
        return await ReconciliationService(session).reconcile()


async def register_webhook() -> None:
    if not settings.webhook_url:
        return
    client = TelegramClient(
        base_url=settings.telegram_api_url, bot_token=settings.bot_token
    )
    await client.set_webhook(settings.webhook_url, settings.webhook_secret)
    logger.info("Registered webhook at %s", settings.webhook_url)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown."""
    # Startup
    await reconcile_assignments()
    await register_webhook()
    yield
    # Shutdown
    await close_db()


app = FastAPI(
    title="Secret Santa Bot",
    description="Gift exchange coordinator for a Telegram group",
    version=settings.commit_hash or "dev",
    lifespan=lifespan,
)

# Include routers
app.include_router(webhooks_router, prefix="/api/webhooks", tags=["webhooks"])


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Optional[str]]:
    """Health check endpoint with database connectivity."""
    try:
        # Test database connection
        result = await db.execute(text("SELECT 1"))
        db_status = "connected" if result.scalar() == 1 else "error"
    except Exception:
        logger.exception("Health check could not reach the database")
        db_status = "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "environment": settings.env,
        "version": settings.commit_hash,
    }


# If run directly, start the server
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
