from __future__ import annotations

from typing import Any, Dict, List, Optional

from models import ProfileRecord
from services.field_normalizer import normalize


def build_profile_row(profile: ProfileRecord, latest_job: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """One row of the profiles table, rendered from stored enrichment data.

    Display fields prefer normalized provider data and fall back to what the
    operator registered. Counts appear only for successfully enriched rows.
    """
    extracted = normalize(profile.enriched_data) if profile.enriched_data is not None else None
    row: Dict[str, Any] = {
        "profile_id": profile.id,
        "name": (extracted.full_name if extracted else None) or profile.name or "Unknown",
        "headline": extracted.headline if extracted else None,
        "position": (extracted.current_position if extracted else None) or profile.title or "-",
        "company": extracted.current_company if extracted else None,
        "linkedin_url": profile.linkedin_url,
        "enriched_status": profile.enriched_status,
        "enriched_at": profile.enriched_at,
        "summary": None,
    }
    if extracted is not None and profile.enriched_status == "success":
        row["summary"] = extracted.brief()
    if latest_job:
        row["last_job_status"] = latest_job.get("job_status")
        if latest_job.get("job_error"):
            row["last_job_error"] = latest_job.get("job_error")
    return row


def build_profile_rows(profiles: List[ProfileRecord], latest_jobs: Optional[Dict[str, Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
    latest_jobs = latest_jobs or {}
    return [build_profile_row(p, latest_jobs.get(p.id)) for p in profiles]


def print_batch_summary(meta: Dict[str, Any]) -> None:
    """Print summary of an enrich-pending run."""
    print("\n" + "=" * 60)
    print("LINKEDIN PROFILE ENRICHMENT - SUMMARY")
    print("=" * 60)
    print(f"Pending Profiles: {meta.get('pending_profiles_total', 0)}")
    print(f"  Enriched: {meta.get('profiles_enriched', 0)}")
    print(f"  Not Modified: {meta.get('profiles_not_modified', 0)}")
    print(f"  Skipped: {meta.get('profiles_skipped', 0)}")
    print(f"  Failed: {meta.get('profiles_failed', 0)}")
    run_id = meta.get("run_id")
    if run_id:
        print(f"Run ID: {run_id}")
    print("=" * 60)
