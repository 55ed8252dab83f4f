# =============================================
# File: flamingo_proxy/config.py
# Purpose: Process-wide settings read once from the environment (.env supported)
# =============================================
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

REQUIRED_VARS = ("OPENAI_API_KEY", "AIRTABLE_PAT", "AIRTABLE_BASE", "SWIPES_TABLE_NAME")

DEFAULT_ASSISTANT_ID = "asst_HUbqZgq3MKrotoCBvSPKtwXj"
DEFAULT_ORIGINS = (
    "https://www.flamingolisting.com",
    "https://flamingolisting.webflow.io",
    "http://localhost:3000",
)


class ConfigError(RuntimeError):
    """Raised when required environment variables are missing or malformed."""


@dataclass(frozen=True)
class Settings:
    """Credentials and tunables. Built once per process, never mutated."""

    openai_api_key: str
    airtable_pat: str
    airtable_base: str
    swipes_table: str
    assistant_id: str = DEFAULT_ASSISTANT_ID
    openai_base_url: str = "https://api.openai.com/v1"
    airtable_api_url: str = "https://api.airtable.com/v0"
    default_table: str = "Listings"
    poll_interval_s: float = 1.5
    # None means "poll until the run leaves queued/in_progress"
    run_timeout_s: Optional[float] = 120.0
    http_timeout_s: float = 30.0
    cors_origins: Tuple[str, ...] = DEFAULT_ORIGINS
    app_env: str = "development"


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def cors_origins_from_env(env: Mapping[str, str]) -> Tuple[str, ...]:
    """CORS allow-list; needed at import time, before credentials are checked."""
    origins = tuple(
        o.strip() for o in (env.get("CORS_ALLOW_ORIGINS") or "").split(",") if o.strip()
    )
    return origins or DEFAULT_ORIGINS


def settings_from_env(env: Mapping[str, str]) -> Settings:
    missing = [name for name in REQUIRED_VARS if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigError("Missing required env-vars: " + ", ".join(missing))

    timeout = _float(env, "ASSISTANT_RUN_TIMEOUT_SECONDS", 120.0)

    return Settings(
        openai_api_key=env["OPENAI_API_KEY"].strip(),
        airtable_pat=env["AIRTABLE_PAT"].strip(),
        airtable_base=env["AIRTABLE_BASE"].strip(),
        swipes_table=env["SWIPES_TABLE_NAME"].strip(),
        assistant_id=(env.get("OPENAI_ASSISTANT_ID") or DEFAULT_ASSISTANT_ID).strip(),
        openai_base_url=(env.get("OPENAI_BASE_URL") or "https://api.openai.com/v1").rstrip("/"),
        airtable_api_url=(env.get("AIRTABLE_API_URL") or "https://api.airtable.com/v0").rstrip("/"),
        default_table=(env.get("AIRTABLE_DEFAULT_TABLE") or "Listings").strip(),
        poll_interval_s=_float(env, "ASSISTANT_POLL_INTERVAL_SECONDS", 1.5),
        run_timeout_s=timeout if timeout > 0 else None,
        http_timeout_s=_float(env, "HTTP_TIMEOUT_SECONDS", 30.0),
        cors_origins=cors_origins_from_env(env),
        app_env=(env.get("APP_ENV") or "development").strip(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    return settings_from_env(os.environ)
