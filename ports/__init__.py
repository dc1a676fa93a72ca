from .provider import ProviderPort
from .repos import ProfileStorePort, JobStorePort

__all__ = [
    "ProviderPort",
    "ProfileStorePort",
    "JobStorePort",
]
