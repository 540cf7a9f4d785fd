"""
Centralized configuration — loaded once per process.

Why a single settings module?
  - Every metric module reads the same thresholds (session gap, idle
    timeout, interaction duration threshold) from one place.
  - Pydantic validates types at import time so a bad env var fails fast
    instead of silently producing wrong windows.
  - No scattered os.getenv() calls across the codebase.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Validated engine settings, read from WEBVITALS_* environment variables."""

    # ── Diagnostics ─────────────────────────────────────────
    debug: bool = Field(default=False, description="Promote unsupported/missing-data diagnostics to warnings")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False, description="Render logs as JSON instead of console output")

    # ── Layout shift session windows ────────────────────────
    cls_session_gap_ms: float = Field(default=1000.0, gt=0, description="Max gap between entries of one session")
    cls_max_session_ms: float = Field(default=5000.0, gt=0, description="Max span of one session window")

    # ── Deferred finalization ───────────────────────────────
    idle_timeout_ms: float = Field(default=500.0, ge=0, description="Upper bound on waiting for an idle period")
    idle_fallback_delay_ms: float = Field(default=100.0, ge=0, description="Delay used when idle callbacks are unavailable")

    # ── Interactions ────────────────────────────────────────
    inp_duration_threshold_ms: float = Field(default=40.0, ge=0, description="Event timing entries shorter than this are not observed")

    class Config:
        env_prefix = "WEBVITALS_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Singleton accessor — parsed once and cached for the process lifetime.
        from configs.settings import get_settings
        cfg = get_settings()
    """
    return Settings()
