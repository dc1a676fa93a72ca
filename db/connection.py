from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from db import schema


def get_connection(db_path: str, timeout: Optional[float] = 30.0) -> sqlite3.Connection:
    """Open the profiles database.

    WAL lets report commands read while an enrichment batch writes. Foreign
    keys are enforced per connection, so jobs cannot point at missing profiles.
    """
    if db_path != ":memory:":
        Path(db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=timeout or 30.0)
    conn.row_factory = sqlite3.Row
    for pragma in ("journal_mode=WAL", "synchronous=NORMAL", "foreign_keys=ON"):
        conn.execute(f"PRAGMA {pragma};")
    return conn


def open_database(db_path: str) -> sqlite3.Connection:
    conn = get_connection(db_path)
    schema.bootstrap(conn)
    return conn
