"""
app/config.py — Pydantic BaseSettings configuration
Google Sheets service account, rate limiting, CORS origins.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:5500",
    "https://eventsroobaroo-dotcom.github.io",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ────────────────────────────────────────────────────────────
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 5000

    # ── Google service account — Sheets API v4 ────────────────────────────────
    google_sheet_id: str = ""
    google_sheet_name: str = "Form Responses"
    google_project_id: str = ""
    google_service_account_email: str = ""
    google_private_key: str = ""
    sheets_timeout_seconds: float = 30.0

    # Timestamp column is written in this zone
    sheet_timezone: str = "Asia/Kolkata"

    # ── Rate limiting — requests per minute per client address ────────────────
    rate_limit: int = 10

    # ── Request bodies larger than this are rejected with 413 ─────────────────
    max_body_bytes: int = 10 * 1024 * 1024

    # ── CORS — comma-separated list, falls back to DEFAULT_ALLOWED_ORIGINS ────
    frontend_url: str = ""

    @field_validator("environment")
    @classmethod
    def validate_env(cls, v: str) -> str:
        allowed = {"development", "production", "testing"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("rate_limit")
    @classmethod
    def validate_rate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("rate_limit must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def allowed_origins(self) -> list[str]:
        if self.frontend_url.strip():
            return [o.strip() for o in self.frontend_url.split(",") if o.strip()]
        return list(DEFAULT_ALLOWED_ORIGINS)

    @property
    def private_key_pem(self) -> str:
        """Private key with escaped newlines restored (env vars carry it on one line)."""
        return self.google_private_key.replace("\\n", "\n")


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance. Use this everywhere."""
    return Settings()
