from __future__ import annotations

import sqlite3

import pytest

from conftest import count_running_jobs
from db import schema
from db.repos.jobs_repo import JobsRepo
from db.repos.profiles_repo import ProfilesRepo


URL = "https://linkedin.com/in/alice"


def test_bootstrap_is_idempotent(conn):
    schema.bootstrap(conn)
    schema.bootstrap(conn)
    tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type IN ('table', 'view')")}
    assert {"profiles", "enrichment_jobs", "v_profiles_latest_job"} <= tables


def test_create_and_get_profile(conn):
    repo = ProfilesRepo(conn)
    profile_id = repo.create_profile(URL, name="Alice", title="Engineer")
    profile = repo.get_profile(profile_id)
    assert profile.linkedin_url == URL
    assert profile.name == "Alice"
    assert profile.enriched_status == "never"
    assert profile.enriched_data is None
    assert profile.created_at and profile.updated_at
    assert repo.find_by_url(URL).id == profile_id
    assert repo.get_profile("missing") is None


def test_status_check_constraint_rejects_unknown_values(conn):
    repo = ProfilesRepo(conn)
    profile_id = repo.create_profile(URL)
    with pytest.raises(sqlite3.IntegrityError):
        repo.set_status(profile_id, "done")


def test_claim_is_compare_and_swap(conn):
    repo = ProfilesRepo(conn)
    profile_id = repo.create_profile(URL)
    assert repo.claim_for_processing(profile_id, "brightdata") is True
    assert repo.claim_for_processing(profile_id, "brightdata") is False
    profile = repo.get_profile(profile_id)
    assert profile.enriched_status == "processing"
    assert profile.enriched_provider == "brightdata"
    assert repo.claim_for_processing("missing", "brightdata") is False


def test_save_enrichment_round_trips_raw_payload(conn):
    repo = ProfilesRepo(conn)
    profile_id = repo.create_profile(URL)
    raw = [{"name": "Ålice", "skills": [{"name": "Go"}], "score": 1.5, "flags": [True, None]}]
    repo.save_enrichment(profile_id, raw, "brightdata", "2024-05-01T12:00:00+00:00")
    profile = repo.get_profile(profile_id)
    assert profile.enriched_data == raw
    assert profile.enriched_status == "success"
    assert profile.enriched_at == "2024-05-01T12:00:00+00:00"


def test_save_enrichment_on_missing_profile_raises(conn):
    with pytest.raises(sqlite3.DatabaseError):
        ProfilesRepo(conn).save_enrichment("missing", {}, "brightdata", "2024-05-01T12:00:00+00:00")


def test_select_pending_filters_by_status(conn):
    repo = ProfilesRepo(conn)
    a = repo.create_profile("https://linkedin.com/in/a")
    b = repo.create_profile("https://linkedin.com/in/b")
    c = repo.create_profile("https://linkedin.com/in/c")
    d = repo.create_profile("https://linkedin.com/in/d")
    repo.set_status(b, "failed")
    repo.set_status(c, "processing")
    repo.save_enrichment(d, {"name": "D"}, "brightdata", "2024-05-01T12:00:00+00:00")

    pending = [p.id for p in repo.select_pending()]
    assert pending == [a, b]
    assert [p.id for p in repo.select_pending(limit=1)] == [a]
    assert repo.select_pending(statuses=()) == []


def test_jobs_require_existing_profile(conn):
    with pytest.raises(sqlite3.IntegrityError):
        JobsRepo(conn).create_job("missing", "brightdata", "running", None, None)


def test_finish_job_resolves_only_once(conn):
    profile_id = ProfilesRepo(conn).create_profile(URL)
    jobs = JobsRepo(conn)
    job_id = jobs.create_job(profile_id, "brightdata", "running", "2024-05-01T12:00:00+00:00", '{"linkedin_url": "x"}')
    assert count_running_jobs(conn, profile_id) == 1

    jobs.finish_job(job_id, "failed", "2024-05-01T12:00:05+00:00", error_message="boom")
    jobs.finish_job(job_id, "success", "2024-05-01T12:09:00+00:00", response_payload_excerpt="{}")

    job = jobs.get_job(job_id)
    assert job.status == "failed"
    assert job.error_message == "boom"
    assert job.finished_at == "2024-05-01T12:00:05+00:00"
    assert job.response_payload_excerpt is None
    assert count_running_jobs(conn, profile_id) == 0


def test_list_jobs_newest_first_and_latest_job_view(conn):
    profiles = ProfilesRepo(conn)
    jobs = JobsRepo(conn)
    p1 = profiles.create_profile("https://linkedin.com/in/p1")
    p2 = profiles.create_profile("https://linkedin.com/in/p2")
    first = jobs.create_job(p1, "brightdata", "running", None, None)
    second = jobs.create_job(p1, "brightdata", "running", None, None)
    jobs.finish_job(second, "failed", "2024-05-01T12:00:00+00:00", error_message="rate limited")
    other = jobs.create_job(p2, "brightdata", "running", None, None)

    assert [j.id for j in jobs.list_jobs(p1)] == [second, first]
    assert [j.id for j in jobs.list_jobs()][0] == other

    latest = profiles.latest_jobs()
    assert latest[p1]["job_id"] == second
    assert latest[p1]["job_error"] == "rate limited"
    assert latest[p2]["job_status"] == "running"
