from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class EnrichmentBrief(BaseModel):
    experience_count: int = 0
    education_count: int = 0
    skills_count: int = 0


class EnrichmentOutcome(BaseModel):
    """Result of one orchestrator invocation that got past the precondition checks."""

    status: Literal["success", "not_modified", "failed"]
    profile_id: str
    message: str | None = None
    error: str | None = None
    enriched_at: str | None = None
    brief: EnrichmentBrief | None = None
    processing_time_ms: int | None = None
    dry_run: bool = False
    # True when the provider answered with a non-success HTTP status
    upstream_failure: bool = False

    model_config = ConfigDict(extra="forbid")
