from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


JobStatus = Literal["queued", "running", "success", "failed"]


class EnrichmentJob(BaseModel):
    """Audit record of one enrichment attempt."""

    id: str
    profile_id: str
    provider: str
    status: JobStatus
    requested_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    request_payload_summary: str | None = None
    response_payload_excerpt: str | None = None
    error_message: str | None = None
    created_at: str | None = None

    model_config = ConfigDict(extra="ignore")
