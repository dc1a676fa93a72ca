from __future__ import annotations

import json
import sqlite3
import uuid
from typing import Any, Dict, List, Optional, Sequence

from models import ProfileRecord
from utils.timestamps import to_iso, utc_now


PROFILE_COLUMNS = (
    "id, name, title, linkedin_url, enriched_data, enriched_provider, "
    "enriched_status, enriched_at, created_at, updated_at"
)


def _row_to_profile(row: sqlite3.Row) -> ProfileRecord:
    data = dict(row)
    raw = data.get("enriched_data")
    data["enriched_data"] = json.loads(raw) if raw is not None else None
    return ProfileRecord(**data)


class ProfilesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    def create_profile(self, linkedin_url: str, name: Optional[str] = None, title: Optional[str] = None) -> str:
        """Insert a new profile in status 'never'; returns the profile id."""
        profile_id = uuid.uuid4().hex
        now = to_iso(utc_now())
        self.conn.execute(
            "INSERT INTO profiles (id, name, title, linkedin_url, enriched_status, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, 'never', ?, ?)",
            (profile_id, name, title, linkedin_url, now, now),
        )
        self.conn.commit()
        return profile_id

    def get_profile(self, profile_id: str) -> Optional[ProfileRecord]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE id = ?", (profile_id,))
        row = cur.fetchone()
        return _row_to_profile(row) if row else None

    def find_by_url(self, linkedin_url: str) -> Optional[ProfileRecord]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE linkedin_url = ? LIMIT 1", (linkedin_url,))
        row = cur.fetchone()
        return _row_to_profile(row) if row else None

    def list_profiles(self, limit: int = 100) -> List[ProfileRecord]:
        """Newest first, as the table view shows them."""
        cur = self.conn.cursor()
        cur.execute(
            f"SELECT {PROFILE_COLUMNS} FROM profiles ORDER BY created_at DESC, rowid DESC LIMIT ?",
            (limit,),
        )
        return [_row_to_profile(r) for r in cur.fetchall()]

    def select_pending(self, statuses: Sequence[str] = ("never", "pending", "failed"), limit: int = 10) -> List[ProfileRecord]:
        """Oldest first: profiles whose status makes them candidates for enrichment."""
        if not statuses:
            return []
        placeholders = ", ".join("?" for _ in statuses)
        cur = self.conn.cursor()
        cur.execute(
            f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE enriched_status IN ({placeholders}) "
            "ORDER BY created_at ASC, rowid ASC LIMIT ?",
            (*statuses, limit),
        )
        return [_row_to_profile(r) for r in cur.fetchall()]

    def latest_jobs(self) -> Dict[str, Dict[str, Any]]:
        """Map profile id -> latest job columns (from v_profiles_latest_job)."""
        cur = self.conn.cursor()
        cur.execute(
            "SELECT profile_id, job_id, job_status, job_finished_at, job_error FROM v_profiles_latest_job "
            "WHERE job_id IS NOT NULL"
        )
        return {
            r["profile_id"]: {
                "job_id": r["job_id"],
                "job_status": r["job_status"],
                "job_finished_at": r["job_finished_at"],
                "job_error": r["job_error"],
            }
            for r in cur.fetchall()
        }

    def claim_for_processing(self, profile_id: str, provider: str) -> bool:
        """Compare-and-swap into 'processing'.

        Returns False when another attempt already holds the profile, so two
        near-simultaneous triggers cannot both reach the provider.
        """
        cur = self.conn.execute(
            "UPDATE profiles SET enriched_status = 'processing', enriched_provider = ?, updated_at = ? "
            "WHERE id = ? AND enriched_status != 'processing'",
            (provider, to_iso(utc_now()), profile_id),
        )
        self.conn.commit()
        return cur.rowcount == 1

    def set_status(self, profile_id: str, status: str) -> None:
        """Change only the status; enriched_data is left untouched."""
        self.conn.execute(
            "UPDATE profiles SET enriched_status = ?, updated_at = ? WHERE id = ?",
            (status, to_iso(utc_now()), profile_id),
        )
        self.conn.commit()

    def save_enrichment(self, profile_id: str, raw_data: Any, provider: str, enriched_at: str) -> None:
        """Persist the raw provider payload verbatim and mark the profile 'success'."""
        # Preserve non-ASCII characters (e.g., umlauts) in stored JSON text
        payload = json.dumps(raw_data, ensure_ascii=False)
        cur = self.conn.execute(
            "UPDATE profiles SET enriched_data = ?, enriched_status = 'success', enriched_at = ?, "
            "enriched_provider = ?, updated_at = ? WHERE id = ?",
            (payload, enriched_at, provider, to_iso(utc_now()), profile_id),
        )
        self.conn.commit()
        if cur.rowcount != 1:
            raise sqlite3.DatabaseError(f"profile {profile_id} was not updated")
