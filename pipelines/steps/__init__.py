# Namespace for pipeline steps
from .enrich_profiles import LoadPendingProfiles, EnrichProfiles  # noqa: F401
