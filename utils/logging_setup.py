from __future__ import annotations

import logging
import os
import sys
from typing import Any

from config.settings import get_settings


LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    "step=%(step)s status=%(status)s duration_ms=%(duration_ms)s "
    "provider=%(provider)s profile_id=%(profile_id)s "
    "error=%(error)s run_id=%(run_id)s"
)


class SafeExtraFormatter(logging.Formatter):
    """Fill the structured fields a record did not pass via ``extra``.

    ``run_id`` falls back to the RUN_ID environment variable the CLI sets, so
    every line of one invocation can be correlated with its provider trace.
    """

    DEFAULTS: dict[str, Any] = {
        "step": "-",
        "status": "-",
        "duration_ms": "-",
        "provider": "-",
        "profile_id": "-",
        "error": "-",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        for key, value in self.DEFAULTS.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        if not hasattr(record, "run_id"):
            record.run_id = os.getenv("RUN_ID") or "-"
        return super().format(record)


def init_logging(level: str | None = None) -> None:
    """Attach one stderr handler to the root logger; repeated calls only adjust the level."""
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers:
        if isinstance(handler.formatter, SafeExtraFormatter):
            handler.setLevel(log_level)
            return
    if root_logger.handlers:
        # Someone else (a test harness, an embedding app) owns the handlers
        return

    # stderr keeps CLI JSON output on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(SafeExtraFormatter(fmt=LOG_FORMAT))
    root_logger.addHandler(handler)
