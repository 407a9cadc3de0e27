"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")

ENV_PREFIX = "WEBREQUEST_"


class RateLimitSettings(BaseModel):
    """Process-wide outbound rate limit: `rate` admissions per `period_ms`."""
    rate: int = Field(default=100, ge=0)
    period_ms: int = Field(default=1000, gt=0)


class HttpSettings(BaseModel):
    """Request invocation settings."""
    request_timeout: float = Field(default=30.0, gt=0, description="Seconds")
    poll_interval_ms: int = Field(default=100, gt=0)
    max_page_retries: int = Field(default=0, ge=0)
    # Reproduces the legacy dispatch where PUT with a text body went out as POST
    put_text_as_post: bool = False


class Settings(BaseModel):
    """Top-level settings."""
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment variables prefixed with ``WEBREQUEST_`` override values
        read from the file.
        """
        settings_path = path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

        rate_limit = dict(data.get("rate_limit") or {})
        http = dict(data.get("http") or {})

        if rate := os.getenv(f"{ENV_PREFIX}RATE"):
            rate_limit["rate"] = rate
        if period := os.getenv(f"{ENV_PREFIX}PERIOD_MS"):
            rate_limit["period_ms"] = period
        if timeout := os.getenv(f"{ENV_PREFIX}REQUEST_TIMEOUT"):
            http["request_timeout"] = timeout
        if interval := os.getenv(f"{ENV_PREFIX}POLL_INTERVAL_MS"):
            http["poll_interval_ms"] = interval
        if retries := os.getenv(f"{ENV_PREFIX}MAX_PAGE_RETRIES"):
            http["max_page_retries"] = retries
        if legacy := os.getenv(f"{ENV_PREFIX}PUT_TEXT_AS_POST"):
            http["put_text_as_post"] = legacy

        return cls(rate_limit=rate_limit, http=http)


# Singleton settings instance
settings = Settings.load()
