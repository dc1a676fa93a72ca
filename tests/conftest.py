from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.gateway'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Provider tracing stays off unless a test enables it
    os.environ.setdefault("PROVIDER_TRACE", "false")


class FakeProvider:
    """In-memory provider: returns ``payload`` or raises ``error``; records calls."""

    provider_name = "brightdata"

    def __init__(self, payload: Any = None, error: Optional[Exception] = None) -> None:
        self.payload = payload if payload is not None else {}
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def call(self, source_url: str, provider_options: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append({"url": source_url, "provider_options": provider_options})
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def conn(tmp_path):
    from db.connection import open_database

    connection = open_database(str(tmp_path / "profiles.db"))
    try:
        yield connection
    finally:
        connection.close()


@pytest.fixture
def fake_provider():
    return FakeProvider()


def count_running_jobs(conn, profile_id: str) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM enrichment_jobs WHERE profile_id = ? AND status = 'running'",
        (profile_id,),
    ).fetchone()
    return int(row[0])
