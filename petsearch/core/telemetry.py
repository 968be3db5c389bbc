"""Telemetry report formatting - Pure functions.

This module builds the payloads reported to the central aggregation
service, correlating weather with search outcomes. Sending is handled by
the shell layer.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from petsearch.core.geo import Point, calculate_bearing, calculate_distance
from petsearch.core.weather import WeatherSnapshot, WindData


REPORT_TYPE = "weather_search_correlation"


@dataclass(frozen=True)
class SearchOutcome:
    """How a search ended, relative to the last known location.

    Attributes:
        found: Whether the animal was found
        distance_from_last_known: Meters from the last known location
        direction_from_last_known: Bearing from the last known location
    """
    found: bool
    distance_from_last_known: float
    direction_from_last_known: float


def compute_search_outcome(
    last_known: Point,
    found_at: Point | None,
) -> SearchOutcome:
    """Describe where an animal was found.

    Pure function. A missing location means not found.
    """
    if found_at is None:
        return SearchOutcome(found=False, distance_from_last_known=0.0, direction_from_last_known=0.0)

    return SearchOutcome(
        found=True,
        distance_from_last_known=calculate_distance(last_known, found_at),
        direction_from_last_known=calculate_bearing(last_known, found_at),
    )


def format_wind_summary(wind: WindData | None) -> dict[str, Any] | None:
    """Format wind as a plain dict.

    Pure function.
    """
    if wind is None:
        return None

    return {
        "speed": wind.speed,
        "direction": wind.direction,
        "gust_speed": wind.gust_speed,
    }


def format_telemetry_report(
    case_id: str,
    weather: WeatherSnapshot | None,
    reported_at: datetime,
    system_name: str = "petsearch",
    outcome: SearchOutcome | None = None,
    wind: WindData | None = None,
) -> dict[str, Any]:
    """Build a telemetry payload for one case.

    Pure function. Wind defaults to the snapshot's wind when not given.

    Args:
        case_id: Case identifier
        weather: Weather snapshot used for the decision, if any
        reported_at: Report timestamp
        system_name: Reporting system identifier
        outcome: Search outcome, if the search has ended
        wind: Wind used for the decision, if supplied by the caller

    Returns:
        JSON-serializable payload
    """
    if wind is None and weather is not None:
        wind = weather.wind

    payload: dict[str, Any] = {
        "system": system_name,
        "type": REPORT_TYPE,
        "case_id": case_id,
        "weather": {
            "wind": format_wind_summary(wind),
            "conditions": weather.conditions.value if weather is not None else None,
        },
        "timestamp": reported_at.isoformat(),
    }

    if outcome is not None:
        payload["outcome"] = {
            "found": outcome.found,
            "distance_from_last_known": round(outcome.distance_from_last_known, 1),
            "direction_from_last_known": round(outcome.direction_from_last_known, 1),
        }

    return payload
