from __future__ import annotations

from typing import Optional


class EnrichmentError(Exception):
    """Base class for enrichment failures; carries the transport status it maps to."""

    status_code: int = 500


class InvalidInputError(EnrichmentError):
    status_code = 400


class NotFoundError(EnrichmentError):
    status_code = 404


class ConflictError(EnrichmentError):
    """Another enrichment attempt for the profile is in flight; retry later."""

    status_code = 409


class ConfigError(EnrichmentError):
    """Provider credentials or identifiers are missing or left at a placeholder."""

    status_code = 500


class ProviderError(EnrichmentError):
    """The provider call failed before a usable response was received."""

    status_code = 500


class UpstreamError(ProviderError):
    """The provider answered with a non-success HTTP status."""

    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class PersistenceError(EnrichmentError):
    """The store rejected a write after the provider call succeeded."""

    status_code = 500
