from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create profiles/enrichment_jobs tables, indexes and views (idempotent)."""
    cur = conn.cursor()

    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS profiles (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  name TEXT,\n"
            "  title TEXT,\n"
            "  linkedin_url TEXT,\n"
            "  enriched_data TEXT,\n"
            "  enriched_provider TEXT,\n"
            "  enriched_status TEXT NOT NULL DEFAULT 'never'\n"
            "    CHECK (enriched_status IN ('never', 'pending', 'processing', 'success', 'failed')),\n"
            "  enriched_at TEXT,\n"
            "  created_at TEXT NOT NULL,\n"
            "  updated_at TEXT NOT NULL\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_profiles_status ON profiles(enriched_status);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_profiles_created ON profiles(created_at);")

    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS enrichment_jobs (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  profile_id TEXT NOT NULL,\n"
            "  provider TEXT NOT NULL,\n"
            "  requested_at TEXT NOT NULL,\n"
            "  started_at TEXT,\n"
            "  finished_at TEXT,\n"
            "  status TEXT NOT NULL\n"
            "    CHECK (status IN ('queued', 'running', 'success', 'failed')),\n"
            "  request_payload_summary TEXT,\n"
            "  response_payload_excerpt TEXT,\n"
            "  error_message TEXT,\n"
            "  created_at TEXT NOT NULL,\n"
            "  FOREIGN KEY(profile_id) REFERENCES profiles(id)\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_jobs_profile_id ON enrichment_jobs(profile_id);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_jobs_status ON enrichment_jobs(status);")

    # Latest job per profile, for the table view
    cur.execute("DROP VIEW IF EXISTS v_profiles_latest_job;")
    cur.execute(
        (
            "CREATE VIEW v_profiles_latest_job AS\n"
            "SELECT\n"
            "  p.id AS profile_id,\n"
            "  p.name,\n"
            "  p.linkedin_url,\n"
            "  p.enriched_status,\n"
            "  p.enriched_at,\n"
            "  j.id AS job_id,\n"
            "  j.status AS job_status,\n"
            "  j.finished_at AS job_finished_at,\n"
            "  j.error_message AS job_error\n"
            "FROM profiles p LEFT JOIN enrichment_jobs j ON j.id = (\n"
            "  SELECT id FROM enrichment_jobs WHERE profile_id = p.id\n"
            "  ORDER BY created_at DESC, rowid DESC LIMIT 1\n"
            ");"
        )
    )

    conn.commit()
