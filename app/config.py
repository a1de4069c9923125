"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy for the notification store",
        min_length=1,
    )
    app_timezone: str = Field(
        default="Europe/Paris",
        description="Timezone used when rendering dates for suppliers",
    )
    realtime_window: int = Field(
        default=50,
        description="Number of most recent notifications streamed to live subscribers",
        gt=0,
    )
    new_notification_window_seconds: int = Field(
        default=10,
        description="Age under which an unread notification is considered newly arrived",
        gt=0,
    )
    notification_retention_days: int = Field(
        default=30,
        description="Age in days after which notifications are removed by the cleanup sweep",
        gt=0,
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending supplier order emails",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of order emails",
        min_length=3,
    )
    sendgrid_template_id: str | None = Field(
        default=None,
        description="Optional SendGrid dynamic template receiving the order parameters",
    )
    supplier_fallback_email: str | None = Field(
        default=None,
        description="Address used when a supplier email cannot be resolved",
    )
    company_name: str = Field(
        default="Optimizi",
        description="Company name rendered in the signature of order emails",
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
