from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EnrichmentOptions(BaseModel):
    dry_run: bool = False
    force: bool = False
    fields: list[str] | None = None
    provider_options: dict[str, Any] | None = None

    model_config = ConfigDict(extra="ignore")


class EnrichmentRequest(BaseModel):
    """Inbound request shape: ``{profile_id, options?}``."""

    profile_id: str | None = None
    options: EnrichmentOptions = Field(default_factory=EnrichmentOptions)

    model_config = ConfigDict(extra="ignore")
