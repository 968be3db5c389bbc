"""Dynamic geofence computation - Pure functions.

The search radius is a function of time, species, behavior, environment
and sighting clusters. It expands over time but contracts around fresh,
trusted sightings. With enough wind the circle is stretched into an
ellipse along the animal's likely travel direction.

Models:
- Dog: fast expansion, follows roads and travel corridors
- Cat: slow expansion, searches near home first
- Indoor-only: small early radius, expansion delayed
- Severe weather: raises urgency metadata, never the radius

All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass

from petsearch.core.case import (
    BehaviorProfile,
    Environment,
    LocationContext,
    PetProfile,
    RoadDensity,
    SightingCluster,
    Species,
    WeatherCondition,
)
from petsearch.core.geo import Point, circles_overlap
from petsearch.core.weather import (
    WindData,
    WindTravelBias,
    calculate_wind_bias,
    is_calm,
)


@dataclass(frozen=True)
class SpeciesModel:
    name: str
    base_radius_meters: float
    expansion_rate_per_hour: float
    max_radius_meters: float
    travel_corridor_bonus: float
    flight_risk_multiplier: float


@dataclass(frozen=True)
class BehaviorModifier:
    radius_multiplier: float
    expansion_delay_hours: float


@dataclass(frozen=True)
class EnvironmentModifier:
    radius_multiplier: float
    expansion_rate: float


@dataclass(frozen=True)
class WeatherUrgency:
    urgency_factor: float
    channel_preference: str


SPECIES_MODELS: dict[Species, SpeciesModel] = {
    Species.DOG: SpeciesModel(
        name="Dog Model",
        base_radius_meters=800,
        expansion_rate_per_hour=200,
        max_radius_meters=25000,
        travel_corridor_bonus=1.5,
        flight_risk_multiplier=2.0,
    ),
    Species.CAT: SpeciesModel(
        name="Cat Model",
        base_radius_meters=200,
        expansion_rate_per_hour=50,
        max_radius_meters=5000,
        travel_corridor_bonus=1.0,
        flight_risk_multiplier=1.3,
    ),
    Species.BIRD: SpeciesModel(
        name="Bird Model",
        base_radius_meters=500,
        expansion_rate_per_hour=500,
        max_radius_meters=50000,
        travel_corridor_bonus=1.0,
        flight_risk_multiplier=3.0,
    ),
    Species.RABBIT: SpeciesModel(
        name="Rabbit Model",
        base_radius_meters=100,
        expansion_rate_per_hour=30,
        max_radius_meters=2000,
        travel_corridor_bonus=1.0,
        flight_risk_multiplier=1.5,
    ),
    Species.OTHER: SpeciesModel(
        name="Generic Model",
        base_radius_meters=300,
        expansion_rate_per_hour=100,
        max_radius_meters=10000,
        travel_corridor_bonus=1.0,
        flight_risk_multiplier=1.5,
    ),
}

BEHAVIOR_MODIFIERS: dict[BehaviorProfile, BehaviorModifier] = {
    BehaviorProfile.INDOOR_ONLY: BehaviorModifier(radius_multiplier=0.3, expansion_delay_hours=6),
    BehaviorProfile.OUTDOOR_ACCESS: BehaviorModifier(radius_multiplier=1.0, expansion_delay_hours=0),
    BehaviorProfile.FLIGHT_RISK: BehaviorModifier(radius_multiplier=2.0, expansion_delay_hours=0),
    BehaviorProfile.KNOWN_WANDERER: BehaviorModifier(radius_multiplier=1.5, expansion_delay_hours=2),
}

ENVIRONMENT_MODIFIERS: dict[Environment, EnvironmentModifier] = {
    Environment.URBAN: EnvironmentModifier(radius_multiplier=0.7, expansion_rate=0.8),
    Environment.SUBURBAN: EnvironmentModifier(radius_multiplier=1.0, expansion_rate=1.0),
    Environment.RURAL: EnvironmentModifier(radius_multiplier=1.5, expansion_rate=1.3),
}

WEATHER_URGENCY: dict[WeatherCondition, WeatherUrgency] = {
    WeatherCondition.NORMAL: WeatherUrgency(urgency_factor=1.0, channel_preference="standard"),
    WeatherCondition.SEVERE_HEAT: WeatherUrgency(urgency_factor=1.8, channel_preference="responder"),
    WeatherCondition.SEVERE_COLD: WeatherUrgency(urgency_factor=1.8, channel_preference="responder"),
    WeatherCondition.STORM: WeatherUrgency(urgency_factor=2.0, channel_preference="responder"),
    WeatherCondition.FLOOD: WeatherUrgency(urgency_factor=2.5, channel_preference="emergency"),
}

# Sighting cluster validity thresholds
MIN_CLUSTER_COUNT = 2
MAX_CLUSTER_RECENCY_HOURS = 24
MIN_CLUSTER_TRUST = 60

# Multiple of the cluster radius the search contracts to
CLUSTER_CONTRACTION_FACTOR = 2

# Multiple of a known roaming range the radius never drops below
KNOWN_RANGE_FLOOR_FACTOR = 1.5

MIN_CONFIDENCE = 0.2
MAX_CONFIDENCE = 1.0


@dataclass(frozen=True)
class GeofenceResult:
    """A computed circular search area.

    Attributes:
        center: Search center
        radius_meters: Search radius in whole meters
        confidence: Confidence in the area, 0.2-1.0
        model: Name of the species model used
        expanded_from_original: Whether time expansion grew the radius
        recentered_on_sighting: Whether the center moved onto a cluster
        urgency_factor: Weather urgency, advisory only
        next_expansion_hours: When callers should recompute
    """
    center: Point
    radius_meters: int
    confidence: float
    model: str
    expanded_from_original: bool
    recentered_on_sighting: bool
    urgency_factor: float
    next_expansion_hours: int


@dataclass(frozen=True)
class EllipticalSearchArea:
    """Wind-stretched search area.

    The major axis points along the likely travel bearing.
    """
    center: Point
    major_axis_meters: float
    major_axis_bearing: float
    minor_axis_meters: float
    eccentricity: float
    area_square_meters: float
    circular_radius_equivalent: float
    wind_adjusted: bool
    wind: WindData | None = None


@dataclass(frozen=True)
class WindAdjustedGeofence:
    """Circular geofence plus its wind refinement, if any."""
    geofence: GeofenceResult
    ellipse: EllipticalSearchArea | None
    wind_bias: WindTravelBias | None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_valid_cluster(cluster: SightingCluster) -> bool:
    """Check whether a cluster is fresh and trusted enough to re-center on.

    Pure function.
    """
    return (
        cluster.count >= MIN_CLUSTER_COUNT
        and cluster.avg_recency_hours < MAX_CLUSTER_RECENCY_HOURS
        and cluster.trust_score >= MIN_CLUSTER_TRUST
    )


def cluster_score(cluster: SightingCluster) -> float:
    """Rank clusters by trust weighted by recency."""
    return cluster.trust_score * (1 / (cluster.avg_recency_hours + 1))


def find_best_sighting_cluster(
    clusters: list[SightingCluster],
) -> SightingCluster | None:
    """Find the best sighting cluster to re-center on.

    Pure function. Requires count >= 2, recency < 24h and trust >= 60;
    ties keep the earliest cluster in the list.

    Args:
        clusters: Candidate clusters

    Returns:
        The highest scoring valid cluster, or None
    """
    valid = [c for c in clusters if is_valid_cluster(c)]
    if not valid:
        return None

    return max(valid, key=cluster_score)


def compute_base_radius(pet: PetProfile, context: LocationContext) -> float:
    """Radius before any time expansion.

    Pure function. The flight-risk multiplier compounds with the
    behavior multiplier.
    """
    species_model = SPECIES_MODELS[pet.species]
    behavior_mod = BEHAVIOR_MODIFIERS[pet.behavior]
    env_mod = ENVIRONMENT_MODIFIERS[context.environment]

    radius = species_model.base_radius_meters
    radius *= behavior_mod.radius_multiplier
    radius *= env_mod.radius_multiplier

    if pet.behavior == BehaviorProfile.FLIGHT_RISK:
        radius *= species_model.flight_risk_multiplier

    if pet.species == Species.DOG and context.road_density == RoadDensity.HIGH:
        radius *= species_model.travel_corridor_bonus

    if pet.known_range_meters and pet.known_range_meters > 0:
        radius = max(radius, pet.known_range_meters * KNOWN_RANGE_FLOOR_FACTOR)

    return radius


def compute_time_expansion(
    pet: PetProfile,
    context: LocationContext,
    hours_since_lost: float,
) -> float:
    """Meters added to the radius for elapsed time.

    Pure function.
    """
    species_model = SPECIES_MODELS[pet.species]
    behavior_mod = BEHAVIOR_MODIFIERS[pet.behavior]
    env_mod = ENVIRONMENT_MODIFIERS[context.environment]

    effective_hours = max(0.0, hours_since_lost - behavior_mod.expansion_delay_hours)
    return effective_hours * species_model.expansion_rate_per_hour * env_mod.expansion_rate


def compute_confidence(
    hours_since_lost: float,
    cluster: SightingCluster | None,
) -> float:
    """Confidence falls with time and rises with a trusted cluster.

    Pure function.
    """
    time_penalty = min(hours_since_lost * 0.02, 0.5)
    sighting_bonus = cluster.trust_score * 0.01 if cluster is not None else 0.0

    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, 0.8 - time_penalty + sighting_bonus))


def compute_next_expansion_hours(hours_since_lost: float) -> int:
    """Hours until the geofence should be recomputed."""
    return max(1, 6 - math.floor(hours_since_lost / 12))


def weather_channel_preference(condition: WeatherCondition) -> str:
    """Preferred channel family for a weather condition.

    Pure function. One of 'standard', 'responder' or 'emergency'.
    """
    return WEATHER_URGENCY[condition].channel_preference


def compute_dynamic_geofence(
    original_location: Point,
    pet: PetProfile,
    context: LocationContext,
    hours_since_lost: float,
    sighting_clusters: list[SightingCluster],
) -> GeofenceResult:
    """Compute the circular search area for a lost pet.

    Pure function.

    Args:
        original_location: Last known location
        pet: Pet profile
        context: Location context
        hours_since_lost: Hours since the pet was lost (negative treated as 0)
        sighting_clusters: Pre-aggregated sighting clusters

    Returns:
        GeofenceResult
    """
    hours = max(0.0, hours_since_lost)
    species_model = SPECIES_MODELS[pet.species]

    base_radius = compute_base_radius(pet, context)
    time_expansion = compute_time_expansion(pet, context, hours)

    final_radius = min(base_radius + time_expansion, species_model.max_radius_meters)

    center = original_location
    cluster = find_best_sighting_cluster(sighting_clusters)
    if cluster is not None:
        center = cluster.centroid
        final_radius = min(final_radius, cluster.radius_meters * CLUSTER_CONTRACTION_FACTOR)

    return GeofenceResult(
        center=center,
        radius_meters=max(0, _round_half_up(final_radius)),
        confidence=compute_confidence(hours, cluster),
        model=species_model.name,
        expanded_from_original=time_expansion > 0,
        recentered_on_sighting=cluster is not None,
        urgency_factor=WEATHER_URGENCY[context.weather_condition].urgency_factor,
        next_expansion_hours=compute_next_expansion_hours(hours),
    )


def create_search_area(
    center: Point,
    base_radius_meters: float,
    species: Species,
    wind: WindData | None,
) -> EllipticalSearchArea:
    """Convert a circular search radius into a wind-adjusted ellipse.

    Pure function. Without wind, or below the calm threshold, the ellipse
    degenerates to the circle.

    The axes scale the circular radius without a further cap, so downwind
    reach may exceed the species maximum radius by up to the downwind
    multiplier (1.5x). The circle itself stays capped; the ellipse is a
    directional refinement of it, not a replacement.

    Args:
        center: Search center
        base_radius_meters: Circular radius
        species: Species, selects the wind model
        wind: Wind reading, if any

    Returns:
        EllipticalSearchArea
    """
    if is_calm(wind):
        return EllipticalSearchArea(
            center=center,
            major_axis_meters=base_radius_meters,
            major_axis_bearing=0.0,
            minor_axis_meters=base_radius_meters,
            eccentricity=0.0,
            area_square_meters=math.pi * base_radius_meters ** 2,
            circular_radius_equivalent=base_radius_meters,
            wind_adjusted=False,
            wind=wind,
        )

    bias = calculate_wind_bias(species, wind)

    major_axis = base_radius_meters * bias.downwind_radius_multiplier
    minor_axis = base_radius_meters * bias.upwind_radius_multiplier

    if major_axis > 0:
        eccentricity = math.sqrt(1 - (minor_axis / major_axis) ** 2)
    else:
        eccentricity = 0.0

    area = math.pi * major_axis * minor_axis

    return EllipticalSearchArea(
        center=center,
        major_axis_meters=major_axis,
        major_axis_bearing=bias.primary_direction,
        minor_axis_meters=minor_axis,
        eccentricity=eccentricity,
        area_square_meters=area,
        circular_radius_equivalent=math.sqrt(area / math.pi),
        wind_adjusted=True,
        wind=wind,
    )


def compute_wind_adjusted_geofence(
    original_location: Point,
    pet: PetProfile,
    context: LocationContext,
    hours_since_lost: float,
    sighting_clusters: list[SightingCluster],
    wind: WindData | None,
) -> WindAdjustedGeofence:
    """Compute the geofence and, with enough wind, its ellipse.

    Pure function. Calm or missing wind yields the circle alone.
    """
    geofence = compute_dynamic_geofence(
        original_location=original_location,
        pet=pet,
        context=context,
        hours_since_lost=hours_since_lost,
        sighting_clusters=sighting_clusters,
    )

    if is_calm(wind):
        return WindAdjustedGeofence(geofence=geofence, ellipse=None, wind_bias=None)

    ellipse = create_search_area(
        center=geofence.center,
        base_radius_meters=geofence.radius_meters,
        species=pet.species,
        wind=wind,
    )

    return WindAdjustedGeofence(
        geofence=geofence,
        ellipse=ellipse,
        wind_bias=calculate_wind_bias(pet.species, wind),
    )


def geofences_overlap(g1: GeofenceResult, g2: GeofenceResult) -> bool:
    """Check if two geofences overlap.

    Pure function. Used to spot cases that may be searching for the same
    animal.
    """
    return circles_overlap(g1.center, g1.radius_meters, g2.center, g2.radius_meters)
