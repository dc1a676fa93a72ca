import argparse
import json
import os
import uuid as _uuid
from datetime import timedelta

from config.settings import get_settings
from db.connection import open_database
from db.repos.jobs_repo import JobsRepo
from db.repos.profiles_repo import ProfilesRepo
from models import EnrichmentOptions
from pipelines.runner import Pipeline, RunContext
from pipelines.steps.enrich_profiles import EnrichProfiles, LoadPendingProfiles
from services.brightdata_client import BrightDataClient, ProviderConfig
from services.enrichment_orchestrator import EnrichmentOrchestrator
from services.gateway import handle_enrich_request
from services.reporting import build_profile_rows, print_batch_summary
from services.url_utils import is_well_formed_url, normalize_linkedin_profile_url
from utils.logging_setup import init_logging


def _open_db(args):
    return open_database(args.db)


def build_orchestrator(conn) -> EnrichmentOrchestrator:
    settings = get_settings()
    provider = BrightDataClient(ProviderConfig.from_settings(settings))
    return EnrichmentOrchestrator(
        ProfilesRepo(conn),
        JobsRepo(conn),
        provider,
        freshness_window=timedelta(hours=settings.enrich_freshness_hours),
    )


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_bootstrap(args):
    _open_db(args)
    print("Schema ready")


def cmd_add_profile(args):
    conn = _open_db(args)
    if not is_well_formed_url(args.url):
        raise SystemExit(f"Invalid LinkedIn URL: {args.url}")
    url = normalize_linkedin_profile_url(args.url) or args.url.strip()
    repo = ProfilesRepo(conn)
    existing = repo.find_by_url(url)
    if existing:
        print(f"Profile already registered: {existing.id}")
        return
    profile_id = repo.create_profile(url, name=args.name, title=args.title)
    print(f"Profile created: {profile_id}")


def cmd_enrich(args):
    conn = _open_db(args)
    options = {"dry_run": args.dry_run, "force": args.force}
    if args.provider_options:
        try:
            options["provider_options"] = json.loads(args.provider_options)
        except json.JSONDecodeError as exc:
            raise SystemExit(f"--provider-options is not valid JSON: {exc}")
    body = {"profile_id": args.profile_id, "options": options}
    response = handle_enrich_request("POST", body, build_orchestrator(conn))
    _print_json({"status_code": response.status_code, "body": response.body})
    if response.status_code >= 400:
        raise SystemExit(1)


def cmd_enrich_pending(args):
    conn = _open_db(args)
    settings = get_settings()

    def _progress(cur, total, profile_id):
        print(f"[{cur}/{total}] Enriching profile_id={profile_id}")

    ctx = RunContext()
    ctx.meta["run_id"] = os.getenv("RUN_ID")
    pipeline = Pipeline([
        LoadPendingProfiles(ProfilesRepo(conn), limit=args.limit or settings.pending_batch_limit),
        EnrichProfiles(
            build_orchestrator(conn),
            EnrichmentOptions(dry_run=args.dry_run, force=args.force),
            on_progress=_progress if args.progress else None,
        ),
    ])
    ctx = pipeline.run(ctx)
    print_batch_summary(ctx.meta)


def cmd_report_profiles(args):
    conn = _open_db(args)
    repo = ProfilesRepo(conn)
    _print_json(build_profile_rows(repo.list_profiles(limit=args.limit), repo.latest_jobs()))


def cmd_report_jobs(args):
    conn = _open_db(args)
    jobs = JobsRepo(conn).list_jobs(profile_id=args.profile_id, limit=args.limit)
    _print_json([job.model_dump() for job in jobs])


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    if not os.getenv("RUN_ID"):
        os.environ["RUN_ID"] = _uuid.uuid4().hex
    parser = argparse.ArgumentParser(description="LinkedIn profile enrichment CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables, indexes and views")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_add = sub.add_parser("add-profile", help="Register a LinkedIn profile for enrichment")
    p_add.add_argument("--url", required=True, help="LinkedIn profile URL")
    p_add.add_argument("--name", default=None)
    p_add.add_argument("--title", default=None)
    p_add.set_defaults(func=cmd_add_profile)

    p_enr = sub.add_parser("enrich", help="Enrich one profile via the provider")
    p_enr.add_argument("--profile-id", required=True)
    p_enr.add_argument("--dry-run", action="store_true", help="Validate and transition states without calling the provider")
    p_enr.add_argument("--force", action="store_true", help="Ignore the freshness window")
    p_enr.add_argument("--provider-options", default=None, help="JSON object merged into the provider request body")
    p_enr.set_defaults(func=cmd_enrich)

    p_pend = sub.add_parser("enrich-pending", help="Enrich profiles that were never enriched or failed")
    p_pend.add_argument("--limit", type=int, default=None, help="Max profiles per run (default from settings)")
    p_pend.add_argument("--dry-run", action="store_true")
    p_pend.add_argument("--force", action="store_true")
    p_pend.add_argument("--progress", action="store_true", help="Print progress for each profile")
    p_pend.set_defaults(func=cmd_enrich_pending)

    p_rp = sub.add_parser("report-profiles", help="Profiles table with enrichment status")
    p_rp.add_argument("--limit", type=int, default=50)
    p_rp.set_defaults(func=cmd_report_profiles)

    p_rj = sub.add_parser("report-jobs", help="Enrichment job history, newest first")
    p_rj.add_argument("--profile-id", default=None)
    p_rj.add_argument("--limit", type=int, default=20)
    p_rj.set_defaults(func=cmd_report_jobs)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
