"""API Handler - JSON mapping for the HTTP entry points.

Turns request bodies into EscalationRequest objects (collecting every
field error at once) and decisions back into JSON-serializable dicts.
Shared by the Cloud Function and the FastAPI service.
"""

import math
import uuid
from typing import Any

from petsearch.core.case import (
    InputValidationError,
    parse_flag,
    parse_location_context,
    parse_pet_profile,
    parse_point,
    parse_sighting_clusters,
)
from petsearch.core.channels import (
    CHANNEL_CONFIGS,
    ChannelEligibility,
    ChannelId,
    parse_channel_ids,
)
from petsearch.core.config import ValidationError
from petsearch.core.geofence import EllipticalSearchArea, GeofenceResult
from petsearch.core.partners import (
    CAMERA_IOT_PARTNERS,
    PUBLIC_DISPLAY_PARTNERS,
    RESPONDER_PARTNERS,
)
from petsearch.core.weather import WeatherSnapshot, WindData, WindTravelBias
from petsearch.orchestrator import EscalationDecision, EscalationRequest


REQUIREMENT_FLAGS = (
    "shelter_confirmed",
    "human_review_complete",
    "is_regional_crisis",
    "has_consent",
    "is_verified",
)


def _number(
    data: dict[str, Any],
    key: str,
    errors: list[ValidationError],
    field_name: str | None = None,
    default: float | None = None,
) -> float | None:
    field_name = field_name or key
    value = data.get(key, default)
    if value is None:
        errors.append(ValidationError(field=field_name, message="Required"))
        return None
    if isinstance(value, bool):
        errors.append(ValidationError(field=field_name, message=f"Expected a number, got {value!r}"))
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors.append(ValidationError(field=field_name, message=f"Expected a number, got {value!r}"))
        return None
    if not math.isfinite(number):
        errors.append(ValidationError(field=field_name, message=f"Expected a finite number, got {value!r}"))
        return None
    return number


def _object(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def parse_wind(data: Any) -> WindData:
    """Parse a {speed, direction, gust_speed} dict.

    Raises:
        InputValidationError: If the reading is malformed
    """
    if not isinstance(data, dict):
        raise InputValidationError([
            ValidationError(field="wind", message="Expected an object with speed/direction")
        ])

    errors: list[ValidationError] = []
    speed = _number(data, "speed", errors, "wind.speed")
    direction = _number(data, "direction", errors, "wind.direction")

    gust = None
    if data.get("gust_speed") is not None:
        gust = _number(data, "gust_speed", errors, "wind.gust_speed")

    if speed is not None and speed < 0:
        errors.append(ValidationError(field="wind.speed", message=f"Speed must not be negative, got {speed}"))
    if direction is not None and not 0 <= direction <= 360:
        errors.append(ValidationError(field="wind.direction", message=f"Direction {direction} out of range [0, 360]"))

    if errors:
        raise InputValidationError(errors)

    return WindData(speed=speed, direction=direction % 360, gust_speed=gust)


def parse_escalation_request(data: Any) -> EscalationRequest:
    """Parse a JSON request body.

    Args:
        data: Decoded JSON body

    Returns:
        EscalationRequest

    Raises:
        InputValidationError: With every field problem found
    """
    if not isinstance(data, dict):
        raise InputValidationError([
            ValidationError(field="body", message="Expected a JSON object")
        ])

    errors: list[ValidationError] = []

    def collect(parse, *args):
        try:
            return parse(*args)
        except InputValidationError as e:
            errors.extend(e.errors)
            return None

    location = collect(parse_point, data.get("location"), "location")
    pet = collect(parse_pet_profile, _object(data, "pet"))
    context = collect(parse_location_context, _object(data, "context"))
    raw_clusters = data.get("sighting_clusters") or []
    if not isinstance(raw_clusters, list) or not all(isinstance(c, dict) for c in raw_clusters):
        errors.append(ValidationError(field="sighting_clusters", message="Expected a list of objects"))
        raw_clusters = []
    clusters = collect(parse_sighting_clusters, raw_clusters)

    wind = None
    if data.get("wind") is not None:
        wind = collect(parse_wind, data["wind"])

    hours = _number(data, "hours_since_lost", errors)

    evidence = _number(data, "evidence_strength", errors, default=0.0)
    if evidence is not None and not 0 <= evidence <= 1:
        errors.append(ValidationError(
            field="evidence_strength",
            message=f"Evidence strength {evidence} out of range [0, 1]",
        ))

    channel_ids = None
    try:
        channel_ids = tuple(parse_channel_ids(data.get("channel_id", "all")))
    except (ValueError, TypeError) as e:
        errors.append(ValidationError(field="channel_id", message=str(e)))

    partner_contracts: frozenset[ChannelId] = frozenset()
    try:
        partner_contracts = frozenset(ChannelId(c) for c in data.get("partner_contracts") or [])
    except ValueError as e:
        errors.append(ValidationError(field="partner_contracts", message=str(e)))

    local_hour = data.get("local_hour")
    if local_hour is not None and (
        isinstance(local_hour, bool) or not isinstance(local_hour, int) or not 0 <= local_hour <= 23
    ):
        errors.append(ValidationError(
            field="local_hour",
            message=f"Expected an hour 0-23, got {local_hour!r}",
        ))

    flags = {
        key: parse_flag(data, key, key, errors)
        for key in REQUIREMENT_FLAGS
    }

    weather_payload = data.get("weather")
    if weather_payload is not None and not isinstance(weather_payload, dict):
        errors.append(ValidationError(field="weather", message="Expected a provider payload object"))

    if errors:
        raise InputValidationError(errors)

    return EscalationRequest(
        case_id=str(data.get("case_id") or uuid.uuid4()),
        original_location=location,
        pet=pet,
        context=context,
        hours_since_lost=hours,
        evidence_strength=evidence,
        sighting_clusters=tuple(clusters),
        wind=wind,
        weather_payload=weather_payload,
        **flags,
        partner_contracts=partner_contracts,
        channel_ids=channel_ids,
        coverage_area=data.get("coverage_area"),
        local_hour=local_hour,
    )


def errors_to_dict(error: InputValidationError) -> dict[str, Any]:
    return {
        "status": "error",
        "message": "Invalid case input",
        "errors": [{"field": e.field, "message": e.message} for e in error.errors],
    }


def _geofence_to_dict(geofence: GeofenceResult) -> dict[str, Any]:
    return {
        "center": {"lat": geofence.center.lat, "lng": geofence.center.lng},
        "radius_meters": geofence.radius_meters,
        "confidence": round(geofence.confidence, 3),
        "model": geofence.model,
        "expanded_from_original": geofence.expanded_from_original,
        "recentered_on_sighting": geofence.recentered_on_sighting,
        "urgency_factor": geofence.urgency_factor,
        "next_expansion_hours": geofence.next_expansion_hours,
    }


def _ellipse_to_dict(ellipse: EllipticalSearchArea | None) -> dict[str, Any] | None:
    if ellipse is None:
        return None
    return {
        "center": {"lat": ellipse.center.lat, "lng": ellipse.center.lng},
        "major_axis_meters": round(ellipse.major_axis_meters, 1),
        "major_axis_bearing": round(ellipse.major_axis_bearing, 1),
        "minor_axis_meters": round(ellipse.minor_axis_meters, 1),
        "eccentricity": round(ellipse.eccentricity, 4),
        "area_square_meters": round(ellipse.area_square_meters, 1),
        "circular_radius_equivalent": round(ellipse.circular_radius_equivalent, 1),
        "wind_adjusted": ellipse.wind_adjusted,
    }


def _wind_bias_to_dict(bias: WindTravelBias | None) -> dict[str, Any] | None:
    if bias is None:
        return None
    return {
        "primary_direction": round(bias.primary_direction, 1),
        "confidence": round(bias.confidence, 3),
        "spread_degrees": round(bias.spread_degrees, 1),
        "downwind_radius_multiplier": round(bias.downwind_radius_multiplier, 3),
        "upwind_radius_multiplier": round(bias.upwind_radius_multiplier, 3),
    }


def _weather_to_dict(weather: WeatherSnapshot | None) -> dict[str, Any] | None:
    if weather is None:
        return None
    impact = weather.search_impact
    return {
        "timestamp": weather.timestamp.isoformat(),
        "temperature": weather.temperature,
        "wind": {
            "speed": weather.wind.speed,
            "direction": weather.wind.direction,
            "gust_speed": weather.wind.gust_speed,
        },
        "precipitation": weather.precipitation_type.value,
        "visibility": weather.visibility,
        "conditions": weather.conditions.value,
        "alerts": [a.headline for a in weather.alerts],
        "search_impact": {
            "overall_impact": impact.overall_impact.value,
            "scent_tracking_quality": impact.scent_tracking_quality,
            "visibility_quality": impact.visibility_quality,
            "searcher_safety_risk": impact.searcher_safety_risk,
            "animal_stress_level": impact.animal_stress_level,
            "recommended_actions": list(impact.recommended_actions),
        },
    }


def _eligibility_to_dict(eligibility: ChannelEligibility) -> dict[str, Any]:
    return {
        "channel_id": eligibility.channel_id.value,
        "eligible": eligibility.eligible,
        "reason": eligibility.reason,
        "blockers": list(eligibility.blockers),
    }


def decision_to_dict(decision: EscalationDecision) -> dict[str, Any]:
    """Convert an EscalationDecision to a JSON-serializable dict."""
    return {
        "case_id": decision.case_id,
        "geofence": _geofence_to_dict(decision.geofence),
        "ellipse": _ellipse_to_dict(decision.ellipse),
        "wind_bias": _wind_bias_to_dict(decision.wind_bias),
        "tier": {
            "tier": decision.tier.tier.name,
            "reason": decision.tier.reason,
        },
        "channels": [_eligibility_to_dict(c) for c in decision.channels],
        "eligible_channels": [c.value for c in decision.eligible_channels],
        "weather": _weather_to_dict(decision.weather),
        "channel_preference": decision.channel_preference,
        "partners": {k.value: v for k, v in decision.partners.items()},
        "summary": decision.summary,
    }


def channel_catalog() -> list[dict[str, Any]]:
    """Static channel admission rules, for reference endpoints."""
    return [
        {
            "id": c.id.value,
            "name": c.name,
            "description": c.description,
            "min_tier": c.min_tier.name,
            "requires_consent": c.requires_consent,
            "requires_verification": c.requires_verification,
            "requires_human_review": c.requires_human_review,
            "requires_partner_contract": c.requires_partner_contract,
            "default_ttl_hours": c.default_ttl_hours,
            "max_ttl_hours": c.max_ttl_hours,
            "rate_limit_per_day": c.rate_limit_per_day,
            "urgency_level": c.urgency_level.value,
        }
        for c in CHANNEL_CONFIGS.values()
    ]


def partner_catalog() -> dict[str, list[dict[str, Any]]]:
    """Partner rosters, for reference endpoints."""
    return {
        "responders": [
            {
                "type": p.type,
                "name": p.name,
                "coverage_areas": list(p.coverage_areas),
                "active_hours": list(p.active_hours),
                "estimated_response_minutes": p.estimated_response_minutes,
                "integration_status": p.integration_status.value,
            }
            for p in RESPONDER_PARTNERS
        ],
        "public_displays": [
            {
                "type": p.type,
                "name": p.name,
                "coverage_areas": list(p.coverage_areas),
                "display_duration_seconds": p.display_duration_seconds,
                "integration_status": p.integration_status.value,
            }
            for p in PUBLIC_DISPLAY_PARTNERS
        ],
        "camera_iot": [
            {
                "type": p.type,
                "name": p.name,
                "supports_geofence_alert": p.supports_geofence_alert,
                "supports_image_match": p.supports_image_match,
                "integration_status": p.integration_status.value,
            }
            for p in CAMERA_IOT_PARTNERS
        ],
    }
