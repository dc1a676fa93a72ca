"""Enrichment state machine for a single profile.

Every call is stateless: eligibility is re-derived from the stored profile,
the profile is claimed with a conditional write to 'processing' before the
provider is contacted, and every exception after the claim ends in a
'failed' profile plus a 'failed' job.

Transitions::

    never|pending|failed|success(stale or forced) --claim--> processing
    processing --dry run--> never
    processing --provider ok--> success
    processing --any error--> failed
"""
from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from models import EnrichmentBrief, EnrichmentOptions, EnrichmentOutcome, ProfileRecord
from ports import JobStorePort, ProfileStorePort, ProviderPort
from services.errors import (
    ConflictError,
    EnrichmentError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
    UpstreamError,
)
from services.field_normalizer import normalize
from services.url_utils import is_well_formed_url
from utils.timestamps import parse_timestamp, to_iso, utc_now


logger = logging.getLogger(__name__)

FRESHNESS_WINDOW = timedelta(hours=24)
EXCERPT_MAX_CHARS = 2000
SUMMARY_MAX_CHARS = 2000
DRY_RUN_MESSAGE = "Dry run completed - no actual enrichment performed"
NOT_MODIFIED_MESSAGE = "Profile was recently enriched. Use force=true to override."
GENERIC_FAILURE_MESSAGE = "Enrichment failed due to an internal error"

_SECRET_MARKERS = ("key", "token", "secret", "password", "auth", "cookie", "credential", "session")


def _redact(value: Any) -> Any:
    """Mask values stored under credential-like keys, at any nesting depth."""
    if isinstance(value, dict):
        return {
            key: "***" if any(marker in str(key).lower() for marker in _SECRET_MARKERS) else _redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(item) for item in value]
    return value


def build_request_summary(linkedin_url: str, options: EnrichmentOptions) -> str:
    """Audit summary of the request: URL plus options, secrets masked, bounded."""
    summary = {
        "linkedin_url": linkedin_url,
        "options": _redact(options.model_dump(exclude_none=True)),
    }
    return json.dumps(summary, ensure_ascii=False, default=str)[:SUMMARY_MAX_CHARS]


class EnrichmentOrchestrator:
    def __init__(
        self,
        profiles: ProfileStorePort,
        jobs: JobStorePort,
        provider: ProviderPort,
        freshness_window: timedelta = FRESHNESS_WINDOW,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.profiles = profiles
        self.jobs = jobs
        self.provider = provider
        self.freshness_window = freshness_window
        self.clock = clock

    # --- eligibility -------------------------------------------------------

    def _load_eligible(self, profile_id: str, options: EnrichmentOptions) -> tuple[ProfileRecord, Optional[EnrichmentOutcome]]:
        profile = self.profiles.get_profile(profile_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        if not is_well_formed_url(profile.linkedin_url):
            raise InvalidInputError("LinkedIn URL is required")
        if profile.enriched_status == "processing":
            raise ConflictError("Profile is already being processed")
        if profile.enriched_status == "success" and profile.enriched_at and not options.force:
            enriched_at = parse_timestamp(profile.enriched_at)
            if enriched_at is not None and self.clock() - enriched_at < self.freshness_window:
                return profile, EnrichmentOutcome(
                    status="not_modified",
                    profile_id=profile_id,
                    message=NOT_MODIFIED_MESSAGE,
                    enriched_at=profile.enriched_at,
                )
        return profile, None

    # --- job bookkeeping (best-effort audit) -------------------------------

    def _start_job(self, profile: ProfileRecord, options: EnrichmentOptions) -> Optional[str]:
        try:
            return self.jobs.create_job(
                profile_id=profile.id,
                provider=self.provider.provider_name,
                status="running",
                started_at=to_iso(self.clock()),
                request_payload_summary=build_request_summary(str(profile.linkedin_url), options),
            )
        except Exception as exc:
            logger.error(
                "failed to create enrichment job; continuing without audit row",
                extra={"step": "job_create", "status": "error", "profile_id": profile.id, "error": str(exc)},
            )
            return None

    def _finish_job(self, job_id: Optional[str], status: str, excerpt: Optional[str] = None, error: Optional[str] = None) -> None:
        if job_id is None:
            return
        try:
            self.jobs.finish_job(
                job_id,
                status=status,
                finished_at=to_iso(self.clock()),
                response_payload_excerpt=excerpt,
                error_message=error,
            )
        except Exception as exc:
            logger.error(
                "failed to finish enrichment job",
                extra={"step": "job_finish", "status": status, "error": str(exc)},
            )

    # --- main entry --------------------------------------------------------

    def enrich(self, profile_id: str, options: Optional[EnrichmentOptions] = None) -> EnrichmentOutcome:
        """Run one enrichment attempt for ``profile_id``.

        Raises NotFoundError, InvalidInputError or ConflictError when the
        profile is not eligible; every later failure is returned as a
        ``failed`` outcome instead of raised.
        """
        options = options or EnrichmentOptions()
        provider_name = self.provider.provider_name

        profile, not_modified = self._load_eligible(profile_id, options)
        if not_modified is not None:
            logger.info("enrichment skipped: still fresh",
                        extra={"step": "eligibility", "status": "not_modified", "profile_id": profile_id})
            return not_modified

        # Must happen before the provider call so concurrent triggers see 'processing'
        if not self.profiles.claim_for_processing(profile_id, provider_name):
            raise ConflictError("Profile is already being processed")

        job_id = self._start_job(profile, options)

        try:
            if options.dry_run:
                return self._complete_dry_run(profile_id, job_id)
            return self._complete_real_run(profile, options, job_id)
        except Exception as exc:
            return self._fail(profile_id, job_id, exc)

    def _complete_dry_run(self, profile_id: str, job_id: Optional[str]) -> EnrichmentOutcome:
        # Dry runs never claim success on the profile
        self.profiles.set_status(profile_id, "never")
        self._finish_job(job_id, "success", excerpt=json.dumps({"dry_run": True}))
        logger.info("dry run completed", extra={"step": "dry_run", "status": "success", "profile_id": profile_id})
        return EnrichmentOutcome(status="success", profile_id=profile_id, message=DRY_RUN_MESSAGE, dry_run=True)

    def _complete_real_run(self, profile: ProfileRecord, options: EnrichmentOptions, job_id: Optional[str]) -> EnrichmentOutcome:
        provider_name = self.provider.provider_name
        t0 = time.monotonic()
        raw = self.provider.call(str(profile.linkedin_url), options.provider_options)
        processing_time_ms = int((time.monotonic() - t0) * 1000)

        extracted = normalize(raw)
        enriched_at = to_iso(self.clock())
        try:
            self.profiles.save_enrichment(profile.id, raw, provider_name, enriched_at)
        except Exception as exc:
            raise PersistenceError(f"Failed to update profile: {exc}") from exc

        excerpt = json.dumps(extracted.model_dump(exclude_none=True), ensure_ascii=False)[:EXCERPT_MAX_CHARS]
        self._finish_job(job_id, "success", excerpt=excerpt)

        brief = EnrichmentBrief(**extracted.brief())
        logger.info(
            "profile enriched",
            extra={
                "step": "enrich",
                "status": "success",
                "provider": provider_name,
                "profile_id": profile.id,
                "duration_ms": processing_time_ms,
            },
        )
        return EnrichmentOutcome(
            status="success",
            profile_id=profile.id,
            brief=brief,
            enriched_at=enriched_at,
            processing_time_ms=processing_time_ms,
        )

    def _fail(self, profile_id: str, job_id: Optional[str], exc: Exception) -> EnrichmentOutcome:
        detail = str(exc) or exc.__class__.__name__
        logger.error(
            "enrichment failed",
            exc_info=not isinstance(exc, EnrichmentError),
            extra={"step": "enrich", "status": "failed", "provider": self.provider.provider_name,
                   "profile_id": profile_id, "error": detail},
        )
        try:
            self.profiles.set_status(profile_id, "failed")
        except Exception as status_exc:
            logger.critical(
                "could not mark profile failed",
                extra={"step": "fail", "status": "error", "profile_id": profile_id, "error": str(status_exc)},
            )
        self._finish_job(job_id, "failed", error=detail)
        # Provider/store messages are safe to surface; anything else stays generic
        message = detail if isinstance(exc, EnrichmentError) else GENERIC_FAILURE_MESSAGE
        return EnrichmentOutcome(
            status="failed",
            profile_id=profile_id,
            error=message,
            upstream_failure=isinstance(exc, UpstreamError),
        )
