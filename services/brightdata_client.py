from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from config.settings import Settings
from services.errors import ConfigError, ProviderError, UpstreamError
from utils.provider_logger import log_call


logger = logging.getLogger(__name__)

PROVIDER_NAME = "brightdata"

# Values shipped in sample env files; treat them as "not configured"
PLACEHOLDER_VALUES = frozenset({
    "linkedin-profile",
    "changeme",
    "change-me",
    "your-api-key",
    "your_api_key",
    "your-collector-id",
    "your_collector_id",
    "xxx",
})

# Body keys owned by the adapter; provider_options may not override them
RESERVED_BODY_KEYS = ("url", "format", "dataset_id")


@dataclass(frozen=True)
class ProviderConfig:
    api_key: Optional[str]
    collector_id: Optional[str]
    base_url: str = "https://api.brightdata.com"
    auth_scheme: str = "Bearer"
    trigger_url: Optional[str] = None
    timeout_seconds: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderConfig":
        return cls(
            api_key=settings.brightdata_api_key,
            collector_id=settings.brightdata_collector_id,
            base_url=settings.brightdata_base_url,
            auth_scheme=settings.brightdata_auth_scheme or "Bearer",
            trigger_url=settings.brightdata_trigger_url,
            timeout_seconds=settings.provider_timeout_seconds,
        )


def _is_placeholder(value: Optional[str]) -> bool:
    text = (value or "").strip()
    return not text or text.lower() in PLACEHOLDER_VALUES or text.startswith("<")


class BrightDataClient:
    """One outbound call to the Bright Data dataset trigger endpoint."""

    provider_name = PROVIDER_NAME

    def __init__(self, config: ProviderConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session

    def _validate_config(self) -> None:
        if _is_placeholder(self.config.api_key):
            raise ConfigError("BRIGHTDATA_API_KEY not configured")
        if _is_placeholder(self.config.collector_id):
            raise ConfigError(
                "BRIGHTDATA_COLLECTOR_ID not configured. Set it to your actual Bright Data collector/dataset ID."
            )

    def build_request(self, source_url: str, provider_options: Optional[Dict[str, Any]] = None) -> tuple[str, Dict[str, Any]]:
        """Return (trigger_url, json_body).

        Generic trigger URLs (e.g. ``/datasets/v3/trigger``) need the dataset id
        in the body; per-dataset URLs already carry it in the path.
        """
        self._validate_config()
        collector_id = str(self.config.collector_id).strip()
        trigger_url = (self.config.trigger_url or "").strip()
        body: Dict[str, Any] = {}
        for key, value in (provider_options or {}).items():
            if key not in RESERVED_BODY_KEYS:
                body[key] = value
        body["url"] = source_url
        body["format"] = "json"
        if trigger_url and collector_id not in trigger_url:
            body["dataset_id"] = collector_id
        if not trigger_url:
            trigger_url = f"{self.config.base_url.rstrip('/')}/datasets/v3/{collector_id}/trigger"
        return trigger_url, body

    def call(self, source_url: str, provider_options: Optional[Dict[str, Any]] = None) -> Any:
        """Trigger a profile collection and return the parsed response body.

        Raises ConfigError, UpstreamError (non-2xx) or ProviderError (network
        failure, undecodable body).
        """
        trigger_url, body = self.build_request(source_url, provider_options)
        headers = {
            "Authorization": f"{self.config.auth_scheme} {self.config.api_key}",
            "Content-Type": "application/json",
        }
        poster = self.session.post if self.session is not None else requests.post

        t0 = time.time()
        try:
            resp = poster(trigger_url, json=body, headers=headers, timeout=self.config.timeout_seconds)
        except requests.RequestException as exc:
            dt = int((time.time() - t0) * 1000)
            log_call(caller="brightdata_client.call", provider=PROVIDER_NAME, operation="trigger",
                     target_url=trigger_url, duration_ms=dt, status="error", error=str(exc))
            raise ProviderError(f"Bright Data request failed: {exc}") from exc
        dt = int((time.time() - t0) * 1000)

        if not resp.ok:
            text = resp.text or ""
            log_call(caller="brightdata_client.call", provider=PROVIDER_NAME, operation="trigger",
                     target_url=trigger_url, duration_ms=dt, status="error",
                     http_status=resp.status_code, error=text[:500])
            raise UpstreamError(
                f"Bright Data API error: {resp.status_code} - {text}",
                upstream_status=resp.status_code,
                body=text,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            log_call(caller="brightdata_client.call", provider=PROVIDER_NAME, operation="trigger",
                     target_url=trigger_url, duration_ms=dt, status="error",
                     http_status=resp.status_code, error="invalid json")
            raise ProviderError("Bright Data returned a response that is not valid JSON") from exc

        log_call(caller="brightdata_client.call", provider=PROVIDER_NAME, operation="trigger",
                 target_url=trigger_url, duration_ms=dt, status="ok", http_status=resp.status_code)
        logger.debug("provider call ok", extra={"step": "provider", "provider": PROVIDER_NAME, "duration_ms": dt})
        return payload
