from __future__ import annotations

import json
import sqlite3
import sys
from typing import Any, Dict, List

import pytest


def _run_cli_with_args(args_list: List[str]) -> None:
    argv_backup = sys.argv[:]
    try:
        sys.argv = ["cli.py"] + args_list
        if "cli" in sys.modules:
            del sys.modules["cli"]
        import cli  # type: ignore
        try:
            cli.main()  # type: ignore[attr-defined]
        except SystemExit as e:
            code = e.code if isinstance(e.code, int) else (0 if e.code is None else 1)
            if code != 0:
                raise
    finally:
        sys.argv = argv_backup


class _FakeResponse:
    status_code = 200
    ok = True
    text = ""

    def __init__(self, payload: Any) -> None:
        self._payload = payload

    def json(self) -> Any:
        return self._payload


@pytest.fixture
def provider_env(monkeypatch):
    monkeypatch.setenv("RUN_ID", "cli-test-run")
    monkeypatch.setenv("BRIGHTDATA_API_KEY", "test-key")
    monkeypatch.setenv("BRIGHTDATA_COLLECTOR_ID", "gd_test")
    monkeypatch.delenv("BRIGHTDATA_TRIGGER_URL", raising=False)
    from config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_post(monkeypatch) -> List[Dict[str, Any]]:
    import services.brightdata_client as bd
    calls: List[Dict[str, Any]] = []

    def _post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json})
        return _FakeResponse({"name": "Alice Example", "skills": ["Go"], "education": [{"school": "TU"}]})

    monkeypatch.setattr(bd.requests, "post", _post)
    return calls


def _profile_ids(db_path) -> List[str]:
    conn = sqlite3.connect(str(db_path))
    try:
        return [r[0] for r in conn.execute("SELECT id FROM profiles ORDER BY created_at")]
    finally:
        conn.close()


def test_cli_add_and_enrich_profile(tmp_path, provider_env, fake_post, capsys):
    db_path = tmp_path / "cli.db"
    _run_cli_with_args(["--db", str(db_path), "bootstrap"])
    _run_cli_with_args(["--db", str(db_path), "add-profile", "--url", "https://www.linkedin.com/in/Alice-Example/", "--name", "Alice"])
    (profile_id,) = _profile_ids(db_path)
    capsys.readouterr()

    _run_cli_with_args(["--db", str(db_path), "enrich", "--profile-id", profile_id])

    out = json.loads(capsys.readouterr().out)
    assert out["status_code"] == 200
    assert out["body"]["brief"] == {"experience_count": 0, "education_count": 1, "skills_count": 1}
    assert fake_post[0]["url"] == "https://api.brightdata.com/datasets/v3/gd_test/trigger"
    assert fake_post[0]["json"]["url"] == "https://linkedin.com/in/alice-example"

    conn = sqlite3.connect(str(db_path))
    try:
        status, data = conn.execute("SELECT enriched_status, enriched_data FROM profiles WHERE id = ?", (profile_id,)).fetchone()
        assert status == "success"
        assert json.loads(data)["name"] == "Alice Example"
        (job_status,) = conn.execute("SELECT status FROM enrichment_jobs WHERE profile_id = ?", (profile_id,)).fetchone()
        assert job_status == "success"
    finally:
        conn.close()

    # Second trigger inside the freshness window is suppressed
    _run_cli_with_args(["--db", str(db_path), "enrich", "--profile-id", profile_id])
    out = json.loads(capsys.readouterr().out)
    assert out["status_code"] == 304
    assert len(fake_post) == 1


def test_cli_add_profile_rejects_bad_url_and_duplicates(tmp_path, provider_env, capsys):
    db_path = tmp_path / "cli_dup.db"
    with pytest.raises(SystemExit):
        _run_cli_with_args(["--db", str(db_path), "add-profile", "--url", "not a url"])
    _run_cli_with_args(["--db", str(db_path), "add-profile", "--url", "https://linkedin.com/in/bob"])
    _run_cli_with_args(["--db", str(db_path), "add-profile", "--url", "https://www.linkedin.com/in/Bob/"])
    assert "already registered" in capsys.readouterr().out
    assert len(_profile_ids(db_path)) == 1


def test_cli_enrich_unknown_profile_exits_nonzero(tmp_path, provider_env, capsys):
    db_path = tmp_path / "cli_missing.db"
    with pytest.raises(SystemExit):
        _run_cli_with_args(["--db", str(db_path), "enrich", "--profile-id", "missing"])
    out = json.loads(capsys.readouterr().out)
    assert out["status_code"] == 404


def test_cli_enrich_pending_and_reports(tmp_path, provider_env, fake_post, capsys):
    db_path = tmp_path / "cli_pending.db"
    _run_cli_with_args(["--db", str(db_path), "add-profile", "--url", "https://linkedin.com/in/a", "--title", "CTO"])
    _run_cli_with_args(["--db", str(db_path), "add-profile", "--url", "https://linkedin.com/in/b"])
    capsys.readouterr()

    _run_cli_with_args(["--db", str(db_path), "enrich-pending", "--limit", "5", "--progress"])
    out = capsys.readouterr().out
    assert "Enriched: 2" in out
    assert len(fake_post) == 2

    _run_cli_with_args(["--db", str(db_path), "report-profiles"])
    rows = json.loads(capsys.readouterr().out)
    assert len(rows) == 2
    assert all(r["enriched_status"] == "success" for r in rows)
    assert all(r["name"] == "Alice Example" for r in rows)
    assert all(r["last_job_status"] == "success" for r in rows)

    _run_cli_with_args(["--db", str(db_path), "report-jobs", "--limit", "10"])
    jobs = json.loads(capsys.readouterr().out)
    assert len(jobs) == 2
    assert {j["status"] for j in jobs} == {"success"}
