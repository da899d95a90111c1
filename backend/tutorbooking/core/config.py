# backend/tutorbooking/core/config.py
import logging
import os
from typing import Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import API_TITLE, API_VERSION, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)


_BOOKING_STATUSES = {"requested", "confirmed", "completed", "cancelled"}


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )
    log_level: str = Field(default="INFO", description="Root log level")

    # Database
    database_url: str = Field(
        default="sqlite+pysqlite:///./tutorbooking.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements to the log")
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    db_pool_timeout: int = Field(default=10, ge=1, description="Seconds to wait for a pooled connection")
    db_pool_recycle: int = Field(default=1800, ge=1, description="Recycle pooled connections after N seconds")

    # Booking defaults
    default_currency: str = Field(default="USD", description="Fallback ISO-4217 currency for rates")
    default_booking_status: str = Field(
        default="confirmed",
        description="Status applied to new bookings when the caller omits one",
    )
    default_booking_topic: str = "Mentorship session"
    default_booking_source: str = "instructor-dashboard"
    default_cancellation_reason: str = "Cancelled by instructor"
    booking_lenient_status: bool = Field(
        default=False,
        description="Coerce unknown booking statuses to 'requested' instead of rejecting them",
    )
    booking_serializable_writes: bool = Field(
        default=True,
        description="Run booking writes under SERIALIZABLE isolation where the database supports it",
    )

    # Security
    password_hash_rounds: int = Field(default=12, ge=4, le=31, description="bcrypt cost factor")
    instructor_id_header: str = Field(
        default="X-Instructor-Id",
        description="Header carrying the authenticated instructor user id",
    )

    # Pagination
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    max_page_size: int = Field(default=MAX_PAGE_SIZE, ge=1)

    api_title: str = API_TITLE
    api_version: str = API_VERSION

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("default_currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        if len(normalized) != 3 or not normalized.isalpha():
            raise ValueError("DEFAULT_CURRENCY must be a 3-letter ISO-4217 code")
        return normalized

    @field_validator("default_booking_status")
    @classmethod
    def _normalize_default_status(cls, value: str) -> str:
        normalized = (value or "").strip().lower()
        if normalized not in _BOOKING_STATUSES:
            raise ValueError(f"DEFAULT_BOOKING_STATUS must be one of {sorted(_BOOKING_STATUSES)}")
        return normalized

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()

    @field_validator("max_page_size")
    @classmethod
    def _max_page_size_covers_default(cls, value: int, info: ValidationInfo) -> int:
        default_size = info.data.get("default_page_size", DEFAULT_PAGE_SIZE)
        if value < default_size:
            raise ValueError("MAX_PAGE_SIZE must be >= DEFAULT_PAGE_SIZE")
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def get_database_url(self) -> str:
        """Get the database URL for the current environment."""
        return self.database_url


settings = Settings()
logger.info(
    "[CONFIG] environment=%s database=%s lenient_status=%s serializable_writes=%s",
    settings.environment,
    "sqlite" if settings.is_sqlite else "postgresql",
    settings.booking_lenient_status,
    settings.booking_serializable_writes,
)
