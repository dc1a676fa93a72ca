from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import ValidationError

from models import EnrichmentOutcome, EnrichmentRequest
from services.enrichment_orchestrator import EnrichmentOrchestrator
from services.errors import EnrichmentError


logger = logging.getLogger(__name__)

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}
INTERNAL_ERROR = "Internal server error"


@dataclass
class GatewayResponse:
    status_code: int
    body: Any
    headers: Dict[str, str] = field(default_factory=dict)


def _json_response(status_code: int, body: Dict[str, Any]) -> GatewayResponse:
    return GatewayResponse(status_code, body, {**CORS_HEADERS, "Content-Type": "application/json"})


def outcome_to_response(outcome: EnrichmentOutcome) -> GatewayResponse:
    if outcome.status == "not_modified":
        return _json_response(304, {"message": outcome.message, "enriched_at": outcome.enriched_at})
    if outcome.status == "failed":
        status_code = 502 if outcome.upstream_failure else 500
        return _json_response(status_code, {"status": "failed", "profile_id": outcome.profile_id, "error": outcome.error})
    if outcome.dry_run:
        return _json_response(200, {"status": "success", "profile_id": outcome.profile_id, "message": outcome.message})
    return _json_response(
        200,
        {
            "status": "success",
            "profile_id": outcome.profile_id,
            "brief": outcome.brief.model_dump() if outcome.brief else None,
            "enriched_at": outcome.enriched_at,
            "processing_time_ms": outcome.processing_time_ms,
        },
    )


def handle_enrich_request(method: str, body: Optional[Any], orchestrator: EnrichmentOrchestrator) -> GatewayResponse:
    """Transport-neutral entry point for ``{profile_id, options?}`` requests."""
    if (method or "").upper() == "OPTIONS":
        return GatewayResponse(200, "ok", dict(CORS_HEADERS))

    try:
        if not isinstance(body, dict):
            return _json_response(400, {"error": "Request body must be a JSON object"})
        try:
            request = EnrichmentRequest.model_validate(body)
        except ValidationError as exc:
            return _json_response(400, {"error": f"Invalid request: {exc.errors()[0].get('msg', 'invalid')}"})
        if not request.profile_id:
            return _json_response(400, {"error": "profile_id is required"})

        try:
            outcome = orchestrator.enrich(request.profile_id, request.options)
        except EnrichmentError as exc:
            return _json_response(exc.status_code, {"error": str(exc)})
        return outcome_to_response(outcome)
    except Exception:
        logger.exception("request error", extra={"step": "gateway", "status": "error"})
        return _json_response(500, {"error": INTERNAL_ERROR})
