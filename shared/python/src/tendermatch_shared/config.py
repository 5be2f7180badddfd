"""
config.py — pydantic-settings Settings class.

All environment variables for the tendermatch platform are declared here.
The engine, the CLI and the API read their knobs from a Settings value;
clients are built from it explicitly and passed in.

Usage:
    from tendermatch_shared.config import Settings, settings
    print(settings.tenders_upstream_url)
    custom = Settings(cache_ttl_s=60)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Supabase (private tenders)
    # -------------------------------------------------------------------------
    supabase_url: str = Field(default="http://localhost:54321")
    supabase_anon_key: str = Field(default="")
    supabase_service_key: str = Field(default="")

    # -------------------------------------------------------------------------
    # Data sources
    # -------------------------------------------------------------------------
    tenders_upstream_url: str = Field(
        default="https://ocds-api.etenders.gov.za/api/OCDSReleases"
    )
    tenders_source_url: str = Field(default="http://localhost:8000/v1/tenders")
    profile_service_url: str = Field(
        default="http://localhost:54321/functions/v1/api-read-profiles"
    )
    http_timeout_s: float = Field(default=30.0)
    upstream_max_attempts: int = Field(default=2, ge=1)

    # -------------------------------------------------------------------------
    # Progressive loader / session cache
    # -------------------------------------------------------------------------
    first_batch_size: int = Field(default=50, ge=1)
    batch_size: int = Field(default=50, ge=1)
    batch_delay_s: float = Field(default=0.3, ge=0)
    max_records: int = Field(default=500, ge=1)
    lookback_days: int = Field(default=30, ge=1)
    cache_ttl_s: float = Field(default=300.0, gt=0)
    page_size: int = Field(default=250, ge=1)

    # -------------------------------------------------------------------------
    # AI reasoning service
    # -------------------------------------------------------------------------
    openai_api_key: str = Field(default="")
    openai_base_url: str | None = Field(default=None)
    ai_model: str = Field(default="gpt-4o-mini")
    ai_max_records: int = Field(default=10, ge=0)
    ai_call_delay_s: float = Field(default=0.5, ge=0)

    # -------------------------------------------------------------------------
    # API server
    # -------------------------------------------------------------------------
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    cors_origins: str = Field(default="http://localhost:3000,http://localhost:5173")

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    # -------------------------------------------------------------------------
    # Derived / computed
    # -------------------------------------------------------------------------
    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def ai_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @field_validator(
        "supabase_url",
        "tenders_upstream_url",
        "tenders_source_url",
        "profile_service_url",
        mode="before",
    )
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Module-level default; entry points may build their own Settings instead
# ---------------------------------------------------------------------------
settings = Settings()
