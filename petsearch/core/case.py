"""Case input models and parsing - Pure functions.

This module defines the immutable inputs of a lost-pet case (pet profile,
location context, sighting clusters) and parses raw request dicts into
them. Malformed input is rejected with InputValidationError before any
computation runs. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from petsearch.core.config import ValidationError, validate_coordinates
from petsearch.core.geo import Point


class Species(str, Enum):
    DOG = "dog"
    CAT = "cat"
    BIRD = "bird"
    RABBIT = "rabbit"
    OTHER = "other"


class BehaviorProfile(str, Enum):
    INDOOR_ONLY = "indoor_only"
    OUTDOOR_ACCESS = "outdoor_access"
    FLIGHT_RISK = "flight_risk"
    KNOWN_WANDERER = "known_wanderer"


class Environment(str, Enum):
    URBAN = "urban"
    SUBURBAN = "suburban"
    RURAL = "rural"


class WeatherCondition(str, Enum):
    """Weather condition category at the search location."""
    NORMAL = "normal"
    SEVERE_HEAT = "severe_heat"
    SEVERE_COLD = "severe_cold"
    STORM = "storm"
    FLOOD = "flood"


class AgeClass(str, Enum):
    PUPPY_KITTEN = "puppy_kitten"
    ADULT = "adult"
    SENIOR = "senior"


class Size(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class RoadDensity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TimeOfDay(str, Enum):
    DAY = "day"
    NIGHT = "night"


class InputValidationError(ValueError):
    """Raised when case input is malformed.

    Attributes:
        errors: Every field-level problem found
    """

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = errors
        details = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"Invalid case input: {details}")


@dataclass(frozen=True)
class PetProfile:
    """Immutable description of the lost animal.

    Attributes:
        species: Animal species
        behavior: Behavior profile
        age: Age class
        size: Body size
        medical_needs: Whether the animal needs medication or care
        known_range_meters: Known roaming range, if any
    """
    species: Species
    behavior: BehaviorProfile
    age: AgeClass = AgeClass.ADULT
    size: Size = Size.MEDIUM
    medical_needs: bool = False
    known_range_meters: float | None = None


@dataclass(frozen=True)
class LocationContext:
    """Immutable description of where the animal was lost.

    Attributes:
        environment: Urban, suburban or rural
        road_density: Density of the road network
        weather_condition: Current weather condition category
        time_of_day: Day or night
        near_water: Close to a river, lake or coast
        near_highway: Close to a highway
    """
    environment: Environment
    road_density: RoadDensity = RoadDensity.MEDIUM
    weather_condition: WeatherCondition = WeatherCondition.NORMAL
    time_of_day: TimeOfDay = TimeOfDay.DAY
    near_water: bool = False
    near_highway: bool = False


@dataclass(frozen=True)
class SightingCluster:
    """A pre-aggregated group of sighting reports.

    Attributes:
        centroid: Center of the reported sightings
        count: Number of sightings in the cluster
        avg_recency_hours: Average age of the sightings
        trust_score: Reporter trust, 0-100
        radius_meters: Spread of the sightings around the centroid
    """
    centroid: Point
    count: int
    avg_recency_hours: float
    trust_score: float
    radius_meters: float


def _parse_enum(
    enum_cls: type[Enum],
    value: Any,
    field_name: str,
    errors: list[ValidationError],
    default: Enum | None = None,
) -> Any:
    """Parse a tag into an enum member, recording an error if unknown."""
    if value is None:
        if default is None:
            errors.append(ValidationError(field=field_name, message="Field is required"))
        return default

    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        errors.append(ValidationError(
            field=field_name,
            message=f"Unknown value '{value}' (expected one of: {allowed})",
        ))
        return default


def _parse_float(
    value: Any,
    field_name: str,
    errors: list[ValidationError],
) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors.append(ValidationError(
            field=field_name,
            message=f"Expected a number, got {value!r}",
        ))
        return None

    if not math.isfinite(number):
        errors.append(ValidationError(
            field=field_name,
            message=f"Expected a finite number, got {value!r}",
        ))
        return None
    return number


def parse_flag(
    data: dict[str, Any],
    key: str,
    field_name: str,
    errors: list[ValidationError],
) -> bool:
    """Read an optional JSON boolean, defaulting to False.

    Pure function. Strings such as "false" are rejected rather than
    coerced by truthiness.
    """
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        errors.append(ValidationError(
            field=field_name,
            message=f"Expected true or false, got {value!r}",
        ))
        return False
    return value


def parse_point(data: Any, field_name: str = "location") -> Point:
    """Parse a {lat, lng} dict into a Point.

    Pure function.

    Raises:
        InputValidationError: If the point is missing or out of range
    """
    errors: list[ValidationError] = []

    if not isinstance(data, dict):
        raise InputValidationError([
            ValidationError(field=field_name, message="Expected an object with lat/lng")
        ])

    lat = _parse_float(data.get("lat"), f"{field_name}.lat", errors)
    lng = _parse_float(data.get("lng"), f"{field_name}.lng", errors)

    if lat is not None and lng is not None:
        errors.extend(validate_coordinates(lat, lng, field_name))

    if errors:
        raise InputValidationError(errors)

    return Point(lat=lat, lng=lng)


def parse_pet_profile(data: dict[str, Any]) -> PetProfile:
    """Parse a pet profile dict.

    Pure function.

    Args:
        data: Raw profile with species, behavior and optional extras

    Returns:
        Parsed PetProfile

    Raises:
        InputValidationError: If any field is malformed
    """
    errors: list[ValidationError] = []

    species = _parse_enum(Species, data.get("species"), "pet.species", errors)
    behavior = _parse_enum(BehaviorProfile, data.get("behavior"), "pet.behavior", errors)
    age = _parse_enum(AgeClass, data.get("age"), "pet.age", errors, AgeClass.ADULT)
    size = _parse_enum(Size, data.get("size"), "pet.size", errors, Size.MEDIUM)

    known_range = None
    if data.get("known_range_meters") is not None:
        known_range = _parse_float(data["known_range_meters"], "pet.known_range_meters", errors)
        if known_range is not None and known_range < 0:
            errors.append(ValidationError(
                field="pet.known_range_meters",
                message=f"Known range must not be negative, got {known_range}",
            ))

    medical_needs = parse_flag(data, "medical_needs", "pet.medical_needs", errors)

    if errors:
        raise InputValidationError(errors)

    return PetProfile(
        species=species,
        behavior=behavior,
        age=age,
        size=size,
        medical_needs=medical_needs,
        known_range_meters=known_range,
    )


def parse_location_context(data: dict[str, Any]) -> LocationContext:
    """Parse a location context dict.

    Pure function.

    Raises:
        InputValidationError: If any field is malformed
    """
    errors: list[ValidationError] = []

    environment = _parse_enum(Environment, data.get("environment"), "context.environment", errors)
    road_density = _parse_enum(
        RoadDensity, data.get("road_density"), "context.road_density", errors, RoadDensity.MEDIUM,
    )
    weather_condition = _parse_enum(
        WeatherCondition, data.get("weather_condition"), "context.weather_condition",
        errors, WeatherCondition.NORMAL,
    )
    time_of_day = _parse_enum(
        TimeOfDay, data.get("time_of_day"), "context.time_of_day", errors, TimeOfDay.DAY,
    )
    near_water = parse_flag(data, "near_water", "context.near_water", errors)
    near_highway = parse_flag(data, "near_highway", "context.near_highway", errors)

    if errors:
        raise InputValidationError(errors)

    return LocationContext(
        environment=environment,
        road_density=road_density,
        weather_condition=weather_condition,
        time_of_day=time_of_day,
        near_water=near_water,
        near_highway=near_highway,
    )


def validate_sighting_cluster(cluster: SightingCluster, field_name: str) -> list[ValidationError]:
    """Validate a sighting cluster.

    Pure function.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = validate_coordinates(cluster.centroid.lat, cluster.centroid.lng, f"{field_name}.centroid")

    if cluster.count < 0:
        errors.append(ValidationError(
            field=f"{field_name}.count",
            message=f"Count must not be negative, got {cluster.count}",
        ))
    if cluster.avg_recency_hours < 0:
        errors.append(ValidationError(
            field=f"{field_name}.avg_recency_hours",
            message=f"Recency must not be negative, got {cluster.avg_recency_hours}",
        ))
    if not 0 <= cluster.trust_score <= 100:
        errors.append(ValidationError(
            field=f"{field_name}.trust_score",
            message=f"Trust score {cluster.trust_score} out of range [0, 100]",
        ))
    if cluster.radius_meters < 0:
        errors.append(ValidationError(
            field=f"{field_name}.radius_meters",
            message=f"Radius must not be negative, got {cluster.radius_meters}",
        ))

    return errors


def parse_sighting_clusters(items: list[dict[str, Any]]) -> list[SightingCluster]:
    """Parse a list of pre-aggregated sighting clusters.

    Pure function.

    Raises:
        InputValidationError: If any cluster is malformed
    """
    errors: list[ValidationError] = []
    clusters: list[SightingCluster] = []

    for i, item in enumerate(items):
        field_name = f"sighting_clusters[{i}]"
        try:
            centroid = parse_point(item.get("centroid"), f"{field_name}.centroid")
        except InputValidationError as e:
            errors.extend(e.errors)
            continue

        count = _parse_float(item.get("count"), f"{field_name}.count", errors)
        recency = _parse_float(item.get("avg_recency_hours"), f"{field_name}.avg_recency_hours", errors)
        trust = _parse_float(item.get("trust_score"), f"{field_name}.trust_score", errors)
        radius = _parse_float(item.get("radius_meters"), f"{field_name}.radius_meters", errors)
        if None in (count, recency, trust, radius):
            continue

        cluster = SightingCluster(
            centroid=centroid,
            count=int(count),
            avg_recency_hours=recency,
            trust_score=trust,
            radius_meters=radius,
        )
        cluster_errors = validate_sighting_cluster(cluster, field_name)
        if cluster_errors:
            errors.extend(cluster_errors)
            continue

        clusters.append(cluster)

    if errors:
        raise InputValidationError(errors)

    return clusters
