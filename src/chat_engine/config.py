from __future__ import annotations

from datetime import tzinfo
from zoneinfo import ZoneInfo

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOCAL_USER_ID: str = "1"

    # IANA zone name used for calendar-day grouping; unset means the process local zone.
    VIEWER_TIMEZONE: str | None = None

    EMPTY_PREVIEW_TEXT: str = "No messages yet"
    TYPING_PREVIEW_TEXT: str = "typing..."
    UNREAD_BADGE_CAP: int = 99
    MAX_REACTION_LENGTH: int = 16

    SEED_DEMO_DATA: bool = False

    CORS_ORIGINS: list[str] = ["*"]
    WS_HEARTBEAT_SECONDS: int = 30

    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    @property
    def viewer_tz(self) -> tzinfo | None:
        return ZoneInfo(self.VIEWER_TIMEZONE) if self.VIEWER_TIMEZONE else None

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
