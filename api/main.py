"""Pet Search API - FastAPI service for lost-pet escalation.

Deployed as a single Cloud Run service. Evaluates cases through the same
orchestrator as the Cloud Function, reserves daily channel slots, and
serves the channel and partner reference data.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from petsearch.api_handler import (
    channel_catalog,
    decision_to_dict,
    errors_to_dict,
    parse_escalation_request,
    partner_catalog,
)
from petsearch.core.case import InputValidationError
from petsearch.core.channels import ChannelId, resolve_ttl_hours
from petsearch.core.config import validate_config
from petsearch.orchestrator import Orchestrator
from petsearch.shell.config_loader import load_config

logging.basicConfig(level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Pet Search API",
    description="Geofence, alert tier and channel eligibility for lost-pet cases",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ===== Request Models =====

class PointModel(BaseModel):
    lat: float
    lng: float


class PetModel(BaseModel):
    species: str
    behavior: str
    age: str | None = None
    size: str | None = None
    medical_needs: bool = False
    known_range_meters: float | None = None


class ContextModel(BaseModel):
    environment: str
    road_density: str | None = None
    weather_condition: str | None = None
    time_of_day: str | None = None
    near_water: bool = False
    near_highway: bool = False


class SightingClusterModel(BaseModel):
    centroid: PointModel
    count: int
    avg_recency_hours: float
    trust_score: float
    radius_meters: float


class WindModel(BaseModel):
    speed: float
    direction: float
    gust_speed: float | None = None


class EscalationRequestModel(BaseModel):
    case_id: str | None = None
    location: PointModel
    pet: PetModel
    context: ContextModel
    hours_since_lost: float
    evidence_strength: float = 0.0
    sighting_clusters: list[SightingClusterModel] = Field(default_factory=list)
    wind: WindModel | None = None
    weather: dict[str, Any] | None = None
    shelter_confirmed: bool = False
    human_review_complete: bool = False
    is_regional_crisis: bool = False
    has_consent: bool = False
    is_verified: bool = False
    partner_contracts: list[str] = Field(default_factory=list)
    channel_id: str | list[str] = "all"
    coverage_area: str | None = None
    local_hour: int | None = None


# ===== Orchestrator =====

_orchestrator: Orchestrator | None = None


def get_orchestrator() -> Orchestrator:
    """Get or create the shared orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        config = load_config()
        for error in validate_config(config).errors:
            logger.warning("Config %s: %s", error.field, error.message)
        _orchestrator = Orchestrator(config)
    return _orchestrator


@app.on_event("shutdown")
def _flush_telemetry() -> None:
    if _orchestrator is not None:
        _orchestrator.telemetry_reporter.shutdown()


# ===== Endpoints =====

@app.post("/v1/escalation")
def evaluate_case(
    body: EscalationRequestModel,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Evaluate a case: geofence, tier and channel eligibility."""
    try:
        request = parse_escalation_request(body.model_dump(exclude_none=True))
    except InputValidationError as e:
        raise HTTPException(status_code=400, detail=errors_to_dict(e))

    decision = orchestrator.evaluate(request)

    return {
        **decision_to_dict(decision),
        "evaluated_at": datetime.now(timezone.utc).isoformat(),
    }


@app.post("/v1/channels/{channel_id}/dispatch")
def dispatch_alert(
    channel_id: ChannelId,
    ttl_hours: float | None = None,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Reserve one of today's alert slots on a channel.

    The alert lifetime is the requested ttl_hours clamped to the channel
    maximum, or the channel default when none is requested.
    """
    result = orchestrator.dispatch(channel_id)
    if not result.allowed:
        raise HTTPException(status_code=429, detail=result.reason)

    return {
        "channel_id": channel_id.value,
        "allowed": True,
        "count": result.channel_count + 1,
        "limit": result.limit,
        "ttl_hours": resolve_ttl_hours(channel_id, ttl_hours),
    }


@app.get("/v1/channels")
def get_channels():
    """List channel admission rules."""
    return {"channels": channel_catalog()}


@app.get("/v1/partners")
def get_partners():
    """List partner rosters."""
    return partner_catalog()


@app.get("/health")
def health_check():
    """Health check endpoint for Cloud Run."""
    return {"status": "healthy"}
