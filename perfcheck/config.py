# perfcheck/config.py
import logging
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

RUNNER_CHOICES = ("lighthouse", "psi", "fake")


class Settings(BaseSettings):
    """
    Application settings for the Web Performance Checker.
    Loaded from environment variables and an optional .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── APP ──────────────────────────────────────────────────────────────────
    APP_NAME: str = "Web Performance Checker"
    LOG_LEVEL: str = "INFO"
    PORT: int = 8000
    CORS_ORIGINS: str = Field(default="*", description="Comma-separated list of allowed origins")

    # ── DATABASE ─────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./perfcheck.db"
    DB_ECHO: bool = False

    # ── AUDIT ENGINE ─────────────────────────────────────────────────────────
    AUDIT_RUNNER: str = Field(default="lighthouse", description="lighthouse | psi | fake")
    AUDIT_TIMEOUT: float = Field(default=120.0, gt=0)
    LIGHTHOUSE_BIN: str = "lighthouse"
    CHROME_FLAGS: str = "--headless"
    PSI_API_KEY: str = ""
    PSI_STRATEGY: str = "desktop"

    # Audit identifiers read from the Lighthouse result. These follow the
    # engine's output schema and may need updating between versions.
    LOAD_TIME_AUDIT: str = "total-blocking-time"
    RESOURCE_SIZE_AUDIT: str = "total-byte-weight"
    REQUEST_COUNT_AUDIT: str = "network-requests"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_postgres_url(cls, v: str) -> str:
        """Converts old-style 'postgres://' URLs to 'postgresql://'."""
        v = (v or "").strip().strip('"').strip("'")
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator("AUDIT_RUNNER")
    @classmethod
    def check_runner(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in RUNNER_CHOICES:
            raise ValueError(f"AUDIT_RUNNER must be one of {', '.join(RUNNER_CHOICES)}")
        return v

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
