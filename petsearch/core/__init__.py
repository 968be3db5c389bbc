"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Case input parsing and validation
- Weather normalization, search impact and wind travel bias
- Dynamic geofence computation
- Alert tier recommendation
- Channel eligibility and daily rate limits
- Partner roster lookups
- Telemetry payload formatting

All functions here are deterministic and have no I/O.
"""

from petsearch.core.case import (
    InputValidationError,
    LocationContext,
    PetProfile,
    SightingCluster,
    parse_location_context,
    parse_pet_profile,
)
from petsearch.core.channels import (
    CHANNEL_CONFIGS,
    ChannelEligibility,
    ChannelId,
    check_channel_eligibility,
    get_eligible_channels,
)
from petsearch.core.geo import Point, calculate_distance
from petsearch.core.geofence import (
    EllipticalSearchArea,
    GeofenceResult,
    compute_dynamic_geofence,
    compute_wind_adjusted_geofence,
)
from petsearch.core.tiers import AlertTier, recommend_alert_tier
from petsearch.core.weather import (
    WeatherSnapshot,
    WindData,
    WindTravelBias,
    assess_search_conditions,
    calculate_wind_bias,
)

__all__ = [
    # Case
    "InputValidationError",
    "LocationContext",
    "PetProfile",
    "SightingCluster",
    "parse_location_context",
    "parse_pet_profile",
    # Geo
    "Point",
    "calculate_distance",
    # Weather
    "WeatherSnapshot",
    "WindData",
    "WindTravelBias",
    "assess_search_conditions",
    "calculate_wind_bias",
    # Geofence
    "EllipticalSearchArea",
    "GeofenceResult",
    "compute_dynamic_geofence",
    "compute_wind_adjusted_geofence",
    # Tiers
    "AlertTier",
    "recommend_alert_tier",
    # Channels
    "CHANNEL_CONFIGS",
    "ChannelEligibility",
    "ChannelId",
    "check_channel_eligibility",
    "get_eligible_channels",
]
