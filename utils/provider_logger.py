from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)


def log_call(
    *,
    caller: str,
    provider: str,
    operation: str,
    target_url: Optional[str] = None,
    duration_ms: Optional[int] = None,
    status: str = "ok",
    http_status: Optional[int] = None,
    error: Optional[str] = None,
    extras: Optional[Dict[str, Any]] = None,
) -> None:
    """Append a single JSON line describing a provider call if tracing is enabled.

    Controlled by PROVIDER_TRACE / PROVIDER_LOG_PATH in config/settings.py.
    Credentials never reach this function; callers pass only the target URL.
    """
    from config.settings import get_settings
    # Ensure latest env changes (tests may monkeypatch env between calls)
    get_settings.cache_clear()
    settings = get_settings()
    if not settings.provider_trace:
        return

    log_path = Path(settings.provider_log_path)

    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "caller": caller,
        "provider": provider,
        "operation": operation,
        "target_url": target_url,
        "duration_ms": duration_ms,
        "status": status,
        "http_status": http_status,
        "error": error,
    }
    run_id = os.getenv("RUN_ID")
    if run_id:
        payload["run_id"] = run_id

    if extras:
        # Shallow merge extras under a dedicated key to avoid collisions
        payload["extras"] = extras

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")
    except OSError as exc:
        # Tracing must not break the enrichment itself
        logger.warning("provider trace write failed", extra={"error": str(exc)})
