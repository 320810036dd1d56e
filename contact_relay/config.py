from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import EmailStr, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Central configuration for the contact relay.

    - Reads from .env (local) and the process environment.
    - Every field has a default: missing mail configuration only shows up
      as a failed verification at startup, never as a crash.
    - Ignores extra env vars so adding new ones doesn't break startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # -------------------------------------------------------------------------
    # Core app
    # -------------------------------------------------------------------------
    app_name: str = Field(default="Contact Relay", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    port: int = Field(default=3000, alias="PORT")

    # Comma-separated list; "*" allows every origin.
    allowed_origins_raw: str = Field(default="*", alias="ALLOWED_ORIGINS")

    # -------------------------------------------------------------------------
    # Filesystem
    # -------------------------------------------------------------------------
    logs_dir: Path = Field(default=Path("logs"), alias="LOGS_DIR")
    static_dir: Path = Field(default=Path("."), alias="STATIC_DIR")

    # -------------------------------------------------------------------------
    # Email (SMTP) + optional SendGrid
    # -------------------------------------------------------------------------
    email_user: Optional[str] = Field(default=None, alias="EMAIL_USER")
    email_pass: Optional[str] = Field(default=None, alias="EMAIL_PASS")
    recipient_email: Optional[EmailStr] = Field(default=None, alias="RECIPIENT_EMAIL")

    email_smtp_host: str = Field(default="smtp.gmail.com", alias="EMAIL_SMTP_HOST")
    email_smtp_port: int = Field(default=587, alias="EMAIL_SMTP_PORT")
    email_use_tls: bool = Field(default=True, alias="EMAIL_USE_TLS")
    smtp_timeout: float = Field(default=30.0, alias="SMTP_TIMEOUT")

    sendgrid_api_key: Optional[str] = Field(default=None, alias="SENDGRID_API_KEY")

    @field_validator(
        "email_user", "email_pass", "recipient_email", "sendgrid_api_key", mode="before"
    )
    @classmethod
    def blank_as_unset(cls, value: Any) -> Any:
        """`RECIPIENT_EMAIL=` in .env means "not configured", not an invalid address."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def allowed_origins(self) -> list[str]:
        """
        Returns the CORS origins from the comma-separated env string.
        Safe if env is missing or empty.
        """
        origins = [
            origin.strip()
            for origin in self.allowed_origins_raw.split(",")
            if origin.strip()
        ]
        return origins or ["*"]


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader so config is evaluated once per process.
    """
    settings = Settings()
    logger.info(
        "Settings loaded (logs_dir=%s, smtp_host=%s, sendgrid=%s)",
        settings.logs_dir,
        settings.email_smtp_host,
        bool(settings.sendgrid_api_key),
    )
    return settings
