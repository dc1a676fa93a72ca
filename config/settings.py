from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def _optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass(frozen=True)
class Settings:
    # Core/runtime
    db_path: str
    log_level: str

    # Bright Data provider
    brightdata_api_key: str | None
    brightdata_base_url: str
    brightdata_collector_id: str | None
    brightdata_auth_scheme: str
    brightdata_trigger_url: str | None

    # No timeout unless configured; the provider call blocks until it answers
    provider_timeout_seconds: float | None = None

    # Freshness/batching
    enrich_freshness_hours: float = 24.0
    pending_batch_limit: int = 10

    # Logging/tracing
    provider_trace: bool = False
    provider_log_path: str = "logs/provider_calls.jsonl"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    return Settings(
        db_path=os.getenv("DB_PATH", "profiles.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        brightdata_api_key=os.getenv("BRIGHTDATA_API_KEY"),
        brightdata_base_url=os.getenv("BRIGHTDATA_BASE_URL", "https://api.brightdata.com"),
        brightdata_collector_id=os.getenv("BRIGHTDATA_COLLECTOR_ID"),
        brightdata_auth_scheme=(os.getenv("BRIGHTDATA_AUTH_SCHEME") or "Bearer").strip(),
        brightdata_trigger_url=os.getenv("BRIGHTDATA_TRIGGER_URL") or None,
        provider_timeout_seconds=_optional_float(os.getenv("PROVIDER_TIMEOUT_SECONDS")),
        enrich_freshness_hours=float(os.getenv("ENRICH_FRESHNESS_HOURS", "24")),
        pending_batch_limit=int(os.getenv("PENDING_BATCH_LIMIT", "10")),
        provider_trace=_as_bool(os.getenv("PROVIDER_TRACE")),
        provider_log_path=os.getenv("PROVIDER_LOG_PATH", "logs/provider_calls.jsonl"),
    )
