from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the hookbot webhook.
    - TELEGRAM_BOT_TOKEN       --- Telegram bot API token (read as is, no prefix)
    - HOOKBOT_TELEGRAM_API_URL --- Telegram Bot API base URL
    - HOOKBOT_HOST             --- bind host for the standalone server
    - HOOKBOT_PORT             --- bind port for the standalone server
    - HOOKBOT_LOG_LEVEL        --- root logging level
    env_prefix: HOOKBOT_ (every field but telegram_bot_token)
    """

    # a missing token is reported per request, not at startup
    telegram_bot_token: Optional[str] = Field(
        None,
        validation_alias="TELEGRAM_BOT_TOKEN",
        description="Telegram bot API token",
    )
    telegram_api_url: str = Field(
        "https://api.telegram.org", description="Telegram Bot API base URL"
    )
    host: str = Field("0.0.0.0", description="Server bind host")
    port: int = Field(8000, description="Server bind port")
    log_level: str = Field("INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HOOKBOT_",
        populate_by_name=True,
        extra="ignore",
    )


# mimic lazy evaluation to avoid initializing settings on import
# needed for tests (import -> init -> test -> clear cache (deinit))
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
