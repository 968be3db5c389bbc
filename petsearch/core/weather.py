"""Weather context and wind travel bias - Pure functions.

This module normalizes provider weather payloads into WeatherSnapshot
objects, assesses how the weather affects a search, and models how wind
skews the direction a lost animal is likely to travel.

Wind model:
- Dogs tend to travel downwind; scent disperses behind them and stronger
  wind strengthens the preference.
- Cats are driven by shelter-seeking and barely follow the wind; they may
  move perpendicular to it to avoid direct exposure.
- Other species borrow the dog model at a low confidence.

All functions are pure with no side effects. Fetching is handled by the
shell layer.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from petsearch.core.case import Species
from petsearch.core.geo import Point, normalize_bearing


# Below this wind speed (mph) the search area stays circular
CALM_WIND_THRESHOLD_MPH = 3.0

# Wind speed (mph) at which the dog model reaches full strength
DOG_FULL_BIAS_WIND_MPH = 15.0

# Wind speed (mph) at which the cat model reaches full strength
CAT_FULL_BIAS_WIND_MPH = 20.0

# Confidence used when other species borrow the dog model
OTHER_SPECIES_BIAS_CONFIDENCE = 0.2

METERS_PER_MILE = 1609.0


class WeatherUnavailable(Exception):
    """Raised when a provider payload holds no usable reading."""


class PrecipitationType(str, Enum):
    NONE = "none"
    RAIN = "rain"
    SNOW = "snow"
    SLEET = "sleet"
    HAIL = "hail"


class PrecipitationIntensity(str, Enum):
    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class AlertType(str, Enum):
    HEAT = "heat"
    COLD = "cold"
    WIND = "wind"
    FLOOD = "flood"
    TORNADO = "tornado"
    THUNDERSTORM = "thunderstorm"
    WINTER_STORM = "winter_storm"
    FIRE = "fire"


class AlertSeverity(str, Enum):
    ADVISORY = "advisory"
    WATCH = "watch"
    WARNING = "warning"
    EMERGENCY = "emergency"


class ImpactLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    SEVERE = "severe"


class ConditionCategory(str, Enum):
    """How workable the weather is for searchers."""
    IDEAL = "ideal"
    GOOD = "good"
    CHALLENGING = "challenging"
    HAZARDOUS = "hazardous"
    IMPOSSIBLE = "impossible"


IMPACT_TO_CONDITION = {
    ImpactLevel.NONE: ConditionCategory.IDEAL,
    ImpactLevel.LOW: ConditionCategory.GOOD,
    ImpactLevel.MODERATE: ConditionCategory.CHALLENGING,
    ImpactLevel.HIGH: ConditionCategory.HAZARDOUS,
    ImpactLevel.SEVERE: ConditionCategory.IMPOSSIBLE,
}


@dataclass(frozen=True)
class WindData:
    """Wind reading.

    Attributes:
        speed: Wind speed in mph
        direction: Compass bearing the wind blows from (0=N, 90=E)
        gust_speed: Gust speed in mph, if reported
    """
    speed: float
    direction: float
    gust_speed: float | None = None


@dataclass(frozen=True)
class WeatherAlert:
    """An active weather alert for the search location."""
    type: AlertType
    severity: AlertSeverity
    headline: str
    description: str = ""
    expires_at: str | None = None


@dataclass(frozen=True)
class SearchImpactAssessment:
    """How the weather affects a search.

    Attributes:
        overall_impact: Bucketed overall impact
        scent_tracking_quality: 0-100, higher is better
        visibility_quality: 0-100, higher is better
        searcher_safety_risk: 0-100, higher is worse
        animal_stress_level: 0-100, estimated
        recommended_actions: Advice for search coordinators
    """
    overall_impact: ImpactLevel
    scent_tracking_quality: float
    visibility_quality: float
    searcher_safety_risk: float
    animal_stress_level: float
    recommended_actions: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class WeatherSnapshot:
    """Normalized weather at a location at one point in time."""
    timestamp: datetime
    location: Point
    temperature: float
    feels_like: float
    humidity: float
    wind: WindData
    precipitation_type: PrecipitationType
    precipitation_intensity: PrecipitationIntensity
    precipitation_probability: float
    visibility: float
    cloud_cover: float
    uv_index: float
    alerts: tuple[WeatherAlert, ...]
    conditions: ConditionCategory
    search_impact: SearchImpactAssessment


@dataclass(frozen=True)
class WindTravelBias:
    """Directional skew of likely travel caused by wind.

    Attributes:
        primary_direction: Most likely travel bearing in degrees
        confidence: Confidence in the primary direction (0-1)
        spread_degrees: Angular spread either side of the primary direction
        downwind_radius_multiplier: Radius multiplier along the primary direction
        upwind_radius_multiplier: Radius multiplier across it
    """
    primary_direction: float
    confidence: float
    spread_degrees: float
    downwind_radius_multiplier: float
    upwind_radius_multiplier: float


# ---------------------------------------------------------------------------
# Wind travel bias
# ---------------------------------------------------------------------------

def calculate_dog_wind_bias(wind: WindData) -> WindTravelBias:
    """Calculate wind-based travel bias for dogs.

    Pure function.

    Wind from 0 (North) means the dog most likely travels South (180).
    Confidence rises from 0.3 when calm to 0.8 at 15 mph, and the spread
    narrows from 90 to 45 degrees over the same range.

    Args:
        wind: Wind reading

    Returns:
        WindTravelBias for a dog
    """
    speed_factor = min(max(wind.speed, 0.0) / DOG_FULL_BIAS_WIND_MPH, 1.0)

    return WindTravelBias(
        primary_direction=normalize_bearing(wind.direction + 180),
        confidence=0.3 + speed_factor * 0.5,
        spread_degrees=90 - speed_factor * 45,
        downwind_radius_multiplier=1.0 + speed_factor * 0.5,
        upwind_radius_multiplier=1.0 - speed_factor * 0.3,
    )


def calculate_cat_wind_bias(wind: WindData) -> WindTravelBias:
    """Calculate wind-based travel bias for cats.

    Pure function.

    Cats seek shelter, which may lie in any direction. Either perpendicular
    to the wind is equally likely; the first one is reported.
    """
    speed_factor = min(max(wind.speed, 0.0) / CAT_FULL_BIAS_WIND_MPH, 1.0)

    return WindTravelBias(
        primary_direction=normalize_bearing(wind.direction + 90),
        confidence=0.1 + speed_factor * 0.2,
        spread_degrees=120,
        downwind_radius_multiplier=1.0,
        upwind_radius_multiplier=1.0,
    )


def calculate_wind_bias(species: Species, wind: WindData) -> WindTravelBias:
    """Calculate wind travel bias for any species.

    Pure function.
    """
    if species == Species.DOG:
        return calculate_dog_wind_bias(wind)
    if species == Species.CAT:
        return calculate_cat_wind_bias(wind)

    dog_bias = calculate_dog_wind_bias(wind)
    return WindTravelBias(
        primary_direction=dog_bias.primary_direction,
        confidence=min(dog_bias.confidence, OTHER_SPECIES_BIAS_CONFIDENCE),
        spread_degrees=dog_bias.spread_degrees,
        downwind_radius_multiplier=dog_bias.downwind_radius_multiplier,
        upwind_radius_multiplier=dog_bias.upwind_radius_multiplier,
    )


def is_calm(wind: WindData | None) -> bool:
    """True when there is no usable wind to skew the search area."""
    return wind is None or wind.speed < CALM_WIND_THRESHOLD_MPH


# ---------------------------------------------------------------------------
# Search impact assessment
# ---------------------------------------------------------------------------

def _bucket_impact(average: float) -> ImpactLevel:
    if average < 10:
        return ImpactLevel.NONE
    elif average < 25:
        return ImpactLevel.LOW
    elif average < 50:
        return ImpactLevel.MODERATE
    elif average < 75:
        return ImpactLevel.HIGH
    else:
        return ImpactLevel.SEVERE


def assess_search_conditions(
    temperature: float | None = None,
    wind: WindData | None = None,
    precipitation_type: PrecipitationType | None = None,
    precipitation_intensity: PrecipitationIntensity | None = None,
    visibility: float | None = None,
    alerts: tuple[WeatherAlert, ...] = (),
) -> SearchImpactAssessment:
    """Assess overall search conditions based on weather.

    Pure function. Missing readings fall back to mild defaults
    (70F, calm, no precipitation, 10 miles visibility).

    Args:
        temperature: Air temperature in Fahrenheit
        wind: Wind reading
        precipitation_type: Kind of precipitation
        precipitation_intensity: Precipitation intensity
        visibility: Visibility in miles
        alerts: Active weather alerts

    Returns:
        SearchImpactAssessment
    """
    actions: list[str] = []
    scent_quality = 100.0
    visibility_quality = 100.0
    safety_risk = 0.0
    animal_stress = 0.0

    temp = 70.0 if temperature is None else temperature
    if temp > 90:
        scent_quality -= 20
        animal_stress += 30
        safety_risk += 20
        actions.append("High heat - search in early morning/evening")
        actions.append("Animal likely seeking shade/water")
    elif temp > 85:
        animal_stress += 15
        actions.append("Warm conditions - bring water for searchers")
    elif temp < 32:
        animal_stress += 25
        safety_risk += 15
        actions.append("Freezing conditions - animal seeking warmth")
        actions.append("Check garages, sheds, under porches")
    elif temp < 40:
        animal_stress += 10
        actions.append("Cold conditions - check sheltered areas")

    wind_speed = wind.speed if wind is not None else 0.0
    if wind_speed > 25:
        scent_quality -= 40
        safety_risk += 25
        actions.append("High winds dispersing scent trails")
        actions.append("Use visual search, scent tracking unreliable")
    elif wind_speed > 15:
        scent_quality -= 20
        actions.append("Moderate wind - focus search downwind of last known location")
    elif wind_speed > 5:
        actions.append("Light wind - expand search ellipse downwind")

    if precipitation_type is not None and precipitation_type != PrecipitationType.NONE:
        if precipitation_intensity == PrecipitationIntensity.HEAVY:
            scent_quality -= 50
            visibility_quality -= 40
            safety_risk += 30
            animal_stress += 30
            actions.append("Heavy precipitation - scent trails washing away")
            actions.append("Animal likely sheltering")
        elif precipitation_intensity == PrecipitationIntensity.MODERATE:
            scent_quality -= 30
            visibility_quality -= 20
            animal_stress += 15
            actions.append("Rain affecting scent - tighten search area")
        else:
            scent_quality -= 15
            actions.append("Light precipitation - search still viable")

    vis = 10.0 if visibility is None else visibility
    if vis < 0.5:
        visibility_quality -= 60
        safety_risk += 40
        actions.append("Very low visibility - postpone visual search")
    elif vis < 2:
        visibility_quality -= 30
        safety_risk += 15
        actions.append("Reduced visibility - use caution")

    if any(a.severity in (AlertSeverity.WARNING, AlertSeverity.EMERGENCY) for a in alerts):
        safety_risk += 50
        actions.append("WEATHER ALERT ACTIVE - prioritize searcher safety")

    average = (
        (100 - scent_quality)
        + (100 - visibility_quality)
        + safety_risk
        + animal_stress
    ) / 4

    return SearchImpactAssessment(
        overall_impact=_bucket_impact(average),
        scent_tracking_quality=max(0.0, scent_quality),
        visibility_quality=max(0.0, visibility_quality),
        searcher_safety_risk=min(100.0, safety_risk),
        animal_stress_level=min(100.0, animal_stress),
        recommended_actions=tuple(actions),
    )


def categorize_conditions(assessment: SearchImpactAssessment) -> ConditionCategory:
    """Map an impact assessment onto a condition category.

    Pure function.
    """
    return IMPACT_TO_CONDITION[assessment.overall_impact]


# ---------------------------------------------------------------------------
# Provider payload normalization
# ---------------------------------------------------------------------------

def _intensity_from_mm_per_hour(mm: float | None) -> PrecipitationIntensity:
    """Classify a precipitation rate in mm/h."""
    if not mm or mm <= 0:
        return PrecipitationIntensity.NONE
    elif mm < 2.5:
        return PrecipitationIntensity.LIGHT
    elif mm < 7.6:
        return PrecipitationIntensity.MODERATE
    else:
        return PrecipitationIntensity.HEAVY


# Keywords used to classify provider alert events
_ALERT_KEYWORDS = (
    ("tornado", AlertType.TORNADO),
    ("thunder", AlertType.THUNDERSTORM),
    ("flood", AlertType.FLOOD),
    ("fire", AlertType.FIRE),
    ("winter", AlertType.WINTER_STORM),
    ("blizzard", AlertType.WINTER_STORM),
    ("ice", AlertType.WINTER_STORM),
    ("heat", AlertType.HEAT),
    ("freeze", AlertType.COLD),
    ("cold", AlertType.COLD),
    ("chill", AlertType.COLD),
    ("wind", AlertType.WIND),
)

# Provider (CAP) severity names
_ALERT_SEVERITIES = {
    "minor": AlertSeverity.ADVISORY,
    "moderate": AlertSeverity.WATCH,
    "severe": AlertSeverity.WARNING,
    "extreme": AlertSeverity.EMERGENCY,
}


def parse_weather_alert(data: dict[str, Any]) -> WeatherAlert | None:
    """Parse a provider alert entry.

    Pure function. Alerts whose event cannot be classified are dropped.
    """
    event = str(data.get("event") or data.get("headline") or "").lower()

    alert_type = None
    for keyword, candidate in _ALERT_KEYWORDS:
        if keyword in event:
            alert_type = candidate
            break
    if alert_type is None:
        return None

    severity_name = str(data.get("severity") or "").lower()
    severity = _ALERT_SEVERITIES.get(severity_name)
    if severity is None:
        try:
            severity = AlertSeverity(severity_name)
        except ValueError:
            severity = AlertSeverity.WARNING if "warning" in event else AlertSeverity.ADVISORY

    return WeatherAlert(
        type=alert_type,
        severity=severity,
        headline=str(data.get("headline") or data.get("event") or ""),
        description=str(data.get("desc") or data.get("description") or ""),
        expires_at=data.get("expires"),
    )


def _build_snapshot(
    location: Point,
    observed_at: datetime,
    temperature: float,
    feels_like: float,
    humidity: float,
    wind: WindData,
    precipitation_type: PrecipitationType,
    precipitation_intensity: PrecipitationIntensity,
    visibility: float,
    cloud_cover: float,
    uv_index: float,
    alerts: tuple[WeatherAlert, ...],
) -> WeatherSnapshot:
    assessment = assess_search_conditions(
        temperature=temperature,
        wind=wind,
        precipitation_type=precipitation_type,
        precipitation_intensity=precipitation_intensity,
        visibility=visibility,
        alerts=alerts,
    )

    return WeatherSnapshot(
        timestamp=observed_at,
        location=location,
        temperature=temperature,
        feels_like=feels_like,
        humidity=humidity,
        wind=wind,
        precipitation_type=precipitation_type,
        precipitation_intensity=precipitation_intensity,
        precipitation_probability=0.0,
        visibility=visibility,
        cloud_cover=cloud_cover,
        uv_index=uv_index,
        alerts=alerts,
        conditions=categorize_conditions(assessment),
        search_impact=assessment,
    )


# Errors a malformed payload can raise while being read
_MALFORMED_ERRORS = (TypeError, ValueError, AttributeError, OverflowError, OSError)


def _block(data: Any, key: str, provider: str) -> dict[str, Any]:
    """Return a nested object from a payload, or {} if absent.

    Raises:
        WeatherUnavailable: If the value is present but not an object
    """
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise WeatherUnavailable(f"Malformed {provider} payload: '{key}' is not an object")
    return value


def _reading(value: Any) -> float:
    """Convert a provider reading, rejecting NaN and infinity."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite reading {value!r}")
    return number


def _optional_reading(value: Any) -> float | None:
    return None if value is None else _reading(value)


def _epoch(value: Any) -> datetime:
    return datetime.fromtimestamp(_reading(value), tz=timezone.utc)


def parse_openweathermap(
    payload: dict[str, Any],
    location: Point,
    observed_at: datetime,
) -> WeatherSnapshot:
    """Normalize an OpenWeatherMap current-weather payload (imperial units).

    Pure function.

    Raises:
        WeatherUnavailable: If the payload carries no reading or is malformed
    """
    if not isinstance(payload, dict):
        raise WeatherUnavailable("Malformed OpenWeatherMap payload: expected an object")

    main = _block(payload, "main", "OpenWeatherMap")
    wind_data = _block(payload, "wind", "OpenWeatherMap")

    if "temp" not in main and "speed" not in wind_data:
        raise WeatherUnavailable(
            f"OpenWeatherMap payload has no reading: {payload.get('message', 'empty payload')}"
        )

    rain = _block(payload, "rain", "OpenWeatherMap")
    snow = _block(payload, "snow", "OpenWeatherMap")
    clouds = _block(payload, "clouds", "OpenWeatherMap")

    try:
        wind = WindData(
            speed=_reading(wind_data.get("speed", 0)),
            direction=_reading(wind_data.get("deg", 0)),
            gust_speed=_optional_reading(wind_data.get("gust")),
        )

        if rain:
            precipitation_type = PrecipitationType.RAIN
            precipitation_intensity = _intensity_from_mm_per_hour(_optional_reading(rain.get("1h")))
        elif snow:
            precipitation_type = PrecipitationType.SNOW
            precipitation_intensity = _intensity_from_mm_per_hour(_optional_reading(snow.get("1h")))
        else:
            precipitation_type = PrecipitationType.NONE
            precipitation_intensity = PrecipitationIntensity.NONE

        if payload.get("dt") is not None:
            observed_at = _epoch(payload["dt"])

        return _build_snapshot(
            location=location,
            observed_at=observed_at,
            temperature=_reading(main.get("temp", 70)),
            feels_like=_reading(main.get("feels_like", 70)),
            humidity=_reading(main.get("humidity", 50)),
            wind=wind,
            precipitation_type=precipitation_type,
            precipitation_intensity=precipitation_intensity,
            visibility=_reading(payload.get("visibility", 10000)) / METERS_PER_MILE,
            cloud_cover=_reading(clouds.get("all", 0)),
            uv_index=0.0,
            alerts=(),
        )
    except _MALFORMED_ERRORS as e:
        raise WeatherUnavailable(f"Malformed OpenWeatherMap payload: {e}") from e


def parse_weatherapi(
    payload: dict[str, Any],
    location: Point,
    observed_at: datetime,
) -> WeatherSnapshot:
    """Normalize a WeatherAPI.com current (or forecast) payload.

    Pure function.

    Raises:
        WeatherUnavailable: If the payload carries no reading or is malformed
    """
    if not isinstance(payload, dict):
        raise WeatherUnavailable("Malformed WeatherAPI payload: expected an object")

    current = _block(payload, "current", "WeatherAPI")
    if not current:
        error = _block(payload, "error", "WeatherAPI").get("message", "missing 'current' block")
        raise WeatherUnavailable(f"WeatherAPI payload has no reading: {error}")

    condition = _block(current, "condition", "WeatherAPI")
    raw_alerts = _block(payload, "alerts", "WeatherAPI").get("alert") or []
    if not isinstance(raw_alerts, list) or not all(isinstance(a, dict) for a in raw_alerts):
        raise WeatherUnavailable("Malformed WeatherAPI payload: 'alerts.alert' is not a list of objects")

    try:
        wind = WindData(
            speed=_reading(current.get("wind_mph", 0)),
            direction=_reading(current.get("wind_degree", 0)),
            gust_speed=_optional_reading(current.get("gust_mph")),
        )

        precip_mm = _reading(current.get("precip_mm") or 0)
        condition_text = str(condition.get("text", "")).lower()
        if precip_mm > 0:
            if "snow" in condition_text:
                precipitation_type = PrecipitationType.SNOW
            elif "sleet" in condition_text:
                precipitation_type = PrecipitationType.SLEET
            elif "hail" in condition_text or "ice pellets" in condition_text:
                precipitation_type = PrecipitationType.HAIL
            else:
                precipitation_type = PrecipitationType.RAIN
        else:
            precipitation_type = PrecipitationType.NONE

        alerts = tuple(
            alert for alert in (parse_weather_alert(a) for a in raw_alerts)
            if alert is not None
        )

        if current.get("last_updated_epoch") is not None:
            observed_at = _epoch(current["last_updated_epoch"])

        return _build_snapshot(
            location=location,
            observed_at=observed_at,
            temperature=_reading(current.get("temp_f", 70)),
            feels_like=_reading(current.get("feelslike_f", 70)),
            humidity=_reading(current.get("humidity", 50)),
            wind=wind,
            precipitation_type=precipitation_type,
            precipitation_intensity=_intensity_from_mm_per_hour(precip_mm),
            visibility=_reading(current.get("vis_miles", 10)),
            cloud_cover=_reading(current.get("cloud", 0)),
            uv_index=_reading(current.get("uv", 0)),
            alerts=alerts,
        )
    except _MALFORMED_ERRORS as e:
        raise WeatherUnavailable(f"Malformed WeatherAPI payload: {e}") from e


PARSERS = {
    "openweathermap": parse_openweathermap,
    "weatherapi": parse_weatherapi,
}


def parse_weather(
    provider: str,
    payload: dict[str, Any],
    location: Point,
    observed_at: datetime,
) -> WeatherSnapshot:
    """Normalize a payload from any supported provider.

    Pure function.

    Raises:
        WeatherUnavailable: If the provider is unknown or the payload is unusable
    """
    parser = PARSERS.get(provider)
    if parser is None:
        raise WeatherUnavailable(f"Unsupported weather provider: {provider}")

    return parser(payload, location, observed_at)
