"""Geographic calculations - Pure functions.

This module provides distance, bearing and overlap calculations for
search areas. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass


# Earth's radius in meters
EARTH_RADIUS_M = 6371000.0


@dataclass(frozen=True)
class Point:
    """A geographic point.

    Attributes:
        lat: Latitude in degrees
        lng: Longitude in degrees
    """
    lat: float
    lng: float


def normalize_bearing(degrees: float) -> float:
    """Wrap a bearing into [0, 360).

    Pure function.
    """
    return degrees % 360


def calculate_distance(p1: Point, p2: Point) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        p1: First point
        p2: Second point

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(p1.lat)
    lat2_rad = math.radians(p2.lat)
    delta_lat = math.radians(p2.lat - p1.lat)
    delta_lng = math.radians(p2.lng - p1.lng)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def calculate_bearing(origin: Point, target: Point) -> float:
    """Initial compass bearing from origin to target.

    Pure function.

    Args:
        origin: Starting point
        target: Destination point

    Returns:
        Bearing in degrees, 0 = North, 90 = East
    """
    lat1 = math.radians(origin.lat)
    lat2 = math.radians(target.lat)
    delta_lng = math.radians(target.lng - origin.lng)

    x = math.sin(delta_lng) * math.cos(lat2)
    y = (
        math.cos(lat1) * math.sin(lat2)
        - math.sin(lat1) * math.cos(lat2) * math.cos(delta_lng)
    )

    return normalize_bearing(math.degrees(math.atan2(x, y)))


def circles_overlap(
    center1: Point,
    radius1_meters: float,
    center2: Point,
    radius2_meters: float,
) -> bool:
    """Check if two circles overlap.

    Pure function. Circles that only touch do not overlap.
    """
    return calculate_distance(center1, center2) < radius1_meters + radius2_meters
