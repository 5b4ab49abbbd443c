"""
Application Settings
Load from environment variables
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "UTC"

    # ======================
    # Quote service
    # ======================
    QUOTE_SERVICE_URL: str = "http://quote.yahoo.com/d/quotes.csv?s="
    QUOTE_FIELD_FORMAT: str = "&f=sl1d1t1c1ohgv&e=.csv"
    QUOTE_REQUEST_TIMEOUT: float = 30.0

    # Development only: serve fixed quotes, never touch the network
    QUOTES_OFFLINE: bool = False

    # ======================
    # Refresh preferences (initial values)
    # ======================
    UPDATE_FREQUENCY_MINUTES: int = Field(default=1, ge=1, le=60)
    USE_MONITOR: bool = False

    # ======================
    # Exchanges
    # ======================
    EXCHANGES_FILE: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
