"""Application settings loaded from the environment."""

import os
from datetime import timedelta
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()

DEFAULT_TELEGRAM_API_URL = "https://api.telegram.org"
DEFAULT_NOVELTY_COOLDOWN_MS = 10 * 60 * 1000


def parse_id_list(raw: Optional[str]) -> List[int]:
    """Parse a comma-separated list of numeric identifiers.

    Blank entries are skipped. Anything that is not an integer raises ValueError.
    """
    ids: List[int] = []
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        try:
            ids.append(int(item))
        except ValueError as e:
            raise ValueError(f"Invalid identifier in list: {item!r}") from e
    return ids


def parse_str_list(raw: Optional[str]) -> List[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


class Settings(BaseModel):
    """Runtime configuration for the bot."""

    env: Optional[str] = None
    commit_hash: Optional[str] = None
    bot_token: str = ""
    telegram_api_url: str = DEFAULT_TELEGRAM_API_URL
    webhook_url: Optional[str] = None
    webhook_secret: Optional[str] = None
    admin_ids: List[int] = Field(default_factory=list)
    privileged_ids: List[int] = Field(default_factory=list)
    novelty_stickers: List[str] = Field(default_factory=list)
    novelty_cooldown_ms: int = DEFAULT_NOVELTY_COOLDOWN_MS
    image_trigger_pattern: Optional[str] = None
    image_trigger_source: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @property
    def is_prod(self) -> bool:
        return self.env == "prod"

    @property
    def novelty_cooldown(self) -> timedelta:
        return timedelta(milliseconds=self.novelty_cooldown_ms)

    def is_admin(self, participant_id: int) -> bool:
        return participant_id in self.admin_ids

    def is_privileged(self, participant_id: int) -> bool:
        return participant_id in self.privileged_ids

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        settings = cls(
            env=os.getenv("ENV"),
            commit_hash=os.getenv("COMMIT_HASH"),
            bot_token=os.getenv("BOT_TOKEN", ""),
            telegram_api_url=os.getenv("TELEGRAM_API_URL", DEFAULT_TELEGRAM_API_URL),
            webhook_url=os.getenv("WEBHOOK_URL") or None,
            webhook_secret=os.getenv("WEBHOOK_SECRET") or None,
            admin_ids=parse_id_list(os.getenv("ADMINS")),
            privileged_ids=parse_id_list(os.getenv("PRIVILEGED_USERS")),
            novelty_stickers=parse_str_list(os.getenv("NOVELTY_STICKERS")),
            novelty_cooldown_ms=int(
                os.getenv("NOVELTY_COOLDOWN_MS", str(DEFAULT_NOVELTY_COOLDOWN_MS))
            ),
            image_trigger_pattern=os.getenv("IMAGE_TRIGGER_PATTERN") or None,
            image_trigger_source=os.getenv("IMAGE_TRIGGER_SOURCE") or None,
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

        if settings.is_prod:
            if not settings.commit_hash:
                raise ValueError("COMMIT_HASH is required for production environments")
            if not settings.bot_token:
                raise ValueError("BOT_TOKEN is required for production environments")

        return settings


settings = Settings.from_env()


def get_settings() -> Settings:
    """Dependency to get application settings."""
    return settings
