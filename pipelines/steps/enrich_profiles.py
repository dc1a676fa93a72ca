from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from db.repos.profiles_repo import ProfilesRepo
from models import EnrichmentOptions
from pipelines.runner import RunContext
from services.enrichment_orchestrator import EnrichmentOrchestrator
from services.errors import ConflictError, EnrichmentError


logger = logging.getLogger(__name__)

PENDING_STATUSES = ("never", "pending", "failed")


class LoadPendingProfiles:
    def __init__(self, repo: ProfilesRepo, limit: int = 10, statuses: Sequence[str] = PENDING_STATUSES) -> None:
        self.repo = repo
        self.limit = limit
        self.statuses = statuses

    def run(self, ctx: RunContext) -> RunContext:
        ctx.profiles = self.repo.select_pending(self.statuses, limit=self.limit)
        ctx.meta["pending_profiles_total"] = len(ctx.profiles)
        return ctx


class EnrichProfiles:
    """Trigger the orchestrator for each loaded profile, one at a time.

    Sequential on purpose: each attempt holds the profile in 'processing'
    and the provider is rate-limited.
    """

    def __init__(
        self,
        orchestrator: EnrichmentOrchestrator,
        options: Optional[EnrichmentOptions] = None,
        on_progress: Optional[Callable[[int, int, str], None]] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.options = options or EnrichmentOptions()
        self.on_progress = on_progress

    def run(self, ctx: RunContext) -> RunContext:
        total = len(ctx.profiles)
        counts = {"success": 0, "not_modified": 0, "failed": 0, "skipped": 0}
        for idx, profile in enumerate(ctx.profiles, start=1):
            if self.on_progress:
                self.on_progress(idx, total, profile.id)
            try:
                outcome = self.orchestrator.enrich(profile.id, self.options)
            except ConflictError:
                counts["skipped"] += 1
                continue
            except EnrichmentError as exc:
                # NotFound/InvalidInput: the row is not enrichable, keep going
                logger.warning(
                    "profile not enrichable",
                    extra={"step": "enrich_pending", "status": "skipped", "profile_id": profile.id, "error": str(exc)},
                )
                counts["skipped"] += 1
                continue
            ctx.outcomes.append(outcome)
            counts[outcome.status] += 1

        ctx.meta["profiles_enriched"] = counts["success"]
        ctx.meta["profiles_not_modified"] = counts["not_modified"]
        ctx.meta["profiles_failed"] = counts["failed"]
        ctx.meta["profiles_skipped"] = counts["skipped"]
        return ctx
