import logging
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # === App Metadata ===
    PROJECT_NAME: str = "Interview Booking API"
    ENVIRONMENT: str = "dev"  # dev, staging, prod
    DEBUG_MODE: bool = False  # tracebacks in 500 responses
    API_VERSION: str = "1.0.0"

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Path("./logs")
    ENABLE_JSON_LOGS: bool = False
    SERVICE_NAME: str = "interview-booking"

    @property
    def LOG_LEVEL_NUMERIC(self) -> int:
        return getattr(logging, self.LOG_LEVEL.upper(), logging.INFO)

    # === Storage ===
    STORAGE_BACKEND: str = "json"  # json, sql, memory
    DATA_DIR: Path = Path("./data")
    DATABASE_URL: str = "sqlite:///./data/interview_booking.db"
    SQL_ECHO: bool = False

    # === Slot seeding ===
    SEED_SLOTS_ON_STARTUP: bool = True
    SEED_START_DATE: date = date(2025, 8, 12)
    SEED_END_DATE: date = date(2025, 8, 16)
    SEED_DAY_START: str = "16:00"
    SEED_DAY_END: str = "18:00"
    SEED_INTERVAL_MINUTES: int = Field(30, ge=5, le=240)
    SEED_BUSINESS_DAYS_ONLY: bool = True

    # === HTTP ===
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    ENABLE_PROMETHEUS: bool = True

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def validate_backend(cls, backend: str) -> str:
        backend = backend.lower()
        if backend not in ("json", "sql", "memory"):
            raise ValueError("STORAGE_BACKEND must be one of: json, sql, memory")
        return backend

    # === Environment Shortcuts ===
    @property
    def IS_PROD(self) -> bool:
        return self.ENVIRONMENT.lower() == "prod"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> AppConfig:
    return AppConfig()


# Global config instance
settings = get_settings()
