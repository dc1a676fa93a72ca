from __future__ import annotations

from typing import Any, List, Optional, Protocol

from models import EnrichmentJob, ProfileRecord


class ProfileStorePort(Protocol):
    def get_profile(self, profile_id: str) -> Optional[ProfileRecord]:
        ...

    def claim_for_processing(self, profile_id: str, provider: str) -> bool:
        ...

    def set_status(self, profile_id: str, status: str) -> None:
        ...

    def save_enrichment(self, profile_id: str, raw_data: Any, provider: str, enriched_at: str) -> None:
        ...


class JobStorePort(Protocol):
    def create_job(
        self,
        profile_id: str,
        provider: str,
        status: str,
        started_at: Optional[str],
        request_payload_summary: Optional[str],
    ) -> str:
        ...

    def finish_job(
        self,
        job_id: str,
        status: str,
        finished_at: str,
        response_payload_excerpt: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None:
        ...

    def list_jobs(self, profile_id: Optional[str] = None, limit: int = 50) -> List[EnrichmentJob]:
        ...
