from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


EnrichmentStatus = Literal["never", "pending", "processing", "success", "failed"]


class ProfileRecord(BaseModel):
    """App/DB record shape for a tracked LinkedIn profile."""

    id: str
    name: str | None = None
    title: str | None = None
    # Required at registration; stored rows may still predate validation
    linkedin_url: str | None = None
    enriched_data: Any = None
    enriched_provider: str | None = None
    enriched_status: EnrichmentStatus = "never"
    enriched_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    model_config = ConfigDict(extra="ignore")
