from __future__ import annotations

import sqlite3
import uuid
from typing import List, Optional

from models import EnrichmentJob
from utils.timestamps import to_iso, utc_now


JOB_COLUMNS = (
    "id, profile_id, provider, requested_at, started_at, finished_at, status, "
    "request_payload_summary, response_payload_excerpt, error_message, created_at"
)


class JobsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    def create_job(
        self,
        profile_id: str,
        provider: str,
        status: str,
        started_at: Optional[str],
        request_payload_summary: Optional[str],
    ) -> str:
        """Insert an audit row for one enrichment attempt; returns the job id."""
        job_id = uuid.uuid4().hex
        now = to_iso(utc_now())
        self.conn.execute(
            "INSERT INTO enrichment_jobs (id, profile_id, provider, requested_at, started_at, status, "
            "request_payload_summary, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (job_id, profile_id, provider, now, started_at, status, request_payload_summary, now),
        )
        self.conn.commit()
        return job_id

    def finish_job(
        self,
        job_id: str,
        status: str,
        finished_at: str,
        response_payload_excerpt: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """Resolve a job exactly once; later calls leave a finished job untouched."""
        self.conn.execute(
            "UPDATE enrichment_jobs SET status = ?, finished_at = ?, response_payload_excerpt = ?, "
            "error_message = ? WHERE id = ? AND finished_at IS NULL",
            (status, finished_at, response_payload_excerpt, error_message, job_id),
        )
        self.conn.commit()

    def get_job(self, job_id: str) -> Optional[EnrichmentJob]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {JOB_COLUMNS} FROM enrichment_jobs WHERE id = ?", (job_id,))
        row = cur.fetchone()
        return EnrichmentJob(**dict(row)) if row else None

    def list_jobs(self, profile_id: Optional[str] = None, limit: int = 50) -> List[EnrichmentJob]:
        """Newest first, optionally for one profile."""
        cur = self.conn.cursor()
        if profile_id:
            cur.execute(
                f"SELECT {JOB_COLUMNS} FROM enrichment_jobs WHERE profile_id = ? "
                "ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (profile_id, limit),
            )
        else:
            cur.execute(
                f"SELECT {JOB_COLUMNS} FROM enrichment_jobs ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (limit,),
            )
        return [EnrichmentJob(**dict(r)) for r in cur.fetchall()]
