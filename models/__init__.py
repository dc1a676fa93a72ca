from .profile_record import ProfileRecord, EnrichmentStatus
from .enrichment_job import EnrichmentJob, JobStatus
from .extracted_fields import (
    ExtractedFields,
    ExperienceEntry,
    EducationEntry,
    LanguageEntry,
)
from .enrichment_request import EnrichmentRequest, EnrichmentOptions
from .enrichment_outcome import EnrichmentOutcome, EnrichmentBrief

__all__ = [
    "ProfileRecord",
    "EnrichmentStatus",
    "EnrichmentJob",
    "JobStatus",
    "ExtractedFields",
    "ExperienceEntry",
    "EducationEntry",
    "LanguageEntry",
    "EnrichmentRequest",
    "EnrichmentOptions",
    "EnrichmentOutcome",
    "EnrichmentBrief",
]
