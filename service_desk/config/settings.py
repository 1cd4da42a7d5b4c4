"""
Application settings for the service desk backend.
"""

from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Ensure .env is read from the working directory (if present)
load_dotenv()


class Settings(BaseSettings):
    # Frozen: one instance is built at startup and shared by every handler.
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True
    )

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = ["*"]

    # Storage and static pages
    DATA_DIR: str = "data"
    STATIC_DIR: str = "public"
    LOGIN_PAGE: str = "Login.html"

    # Admin
    ADMIN_USER: str = "admin"
    ADMIN_PASS: str = "admin123"
    ADMIN_PHONE: Optional[str] = None

    # Twilio SMS
    TWILIO_SID: Optional[str] = None
    TWILIO_AUTH: Optional[str] = None
    TWILIO_PHONE: Optional[str] = None
    DEFAULT_COUNTRY_CODE: str = "+91"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @property
    def sms_configured(self) -> bool:
        return bool(self.TWILIO_SID and self.TWILIO_AUTH and self.TWILIO_PHONE)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
