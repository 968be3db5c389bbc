"""Partner rosters - Read-only reference data and pure lookups.

Responder, public display and camera/IoT partners that can carry alerts
once a case is eligible for their channel. The rosters are never
mutated at runtime.
"""

from dataclasses import dataclass
from enum import Enum

from petsearch.core.channels import ChannelId


class IntegrationStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    PILOT = "pilot"
    INACTIVE = "inactive"


# Statuses that can receive live alerts
LIVE_STATUSES = frozenset({IntegrationStatus.ACTIVE, IntegrationStatus.PILOT})

# Coverage area matching every location
NATIONAL_COVERAGE = "*"


@dataclass(frozen=True)
class ResponderPartner:
    """A responder network partner.

    Attributes:
        type: Partner type (e.g. 'USPS', 'Animal_Control')
        name: Display name
        coverage_areas: County codes, environments, or '*' for national
        active_hours: (start, end) in 24h local time, end exclusive
        estimated_response_minutes: Typical time to respond
        requires_route_match: Only useful when a route passes the area
        integration_status: Integration state
    """
    type: str
    name: str
    coverage_areas: tuple[str, ...]
    active_hours: tuple[int, int]
    estimated_response_minutes: int
    requires_route_match: bool
    integration_status: IntegrationStatus


@dataclass(frozen=True)
class PublicDisplayPartner:
    type: str
    name: str
    location_count: int
    coverage_areas: tuple[str, ...]
    display_duration_seconds: int
    rotation_slots: int
    integration_status: IntegrationStatus


@dataclass(frozen=True)
class CameraIoTPartner:
    type: str
    name: str
    partner_api: str
    supports_geofence_alert: bool
    supports_image_match: bool
    privacy_compliant: bool
    integration_status: IntegrationStatus


RESPONDER_PARTNERS: tuple[ResponderPartner, ...] = (
    ResponderPartner(
        type="USPS",
        name="United States Postal Service",
        coverage_areas=(NATIONAL_COVERAGE,),
        active_hours=(7, 18),
        estimated_response_minutes=240,  # route-based
        requires_route_match=True,
        integration_status=IntegrationStatus.PILOT,
    ),
    ResponderPartner(
        type="UPS",
        name="UPS Drivers",
        coverage_areas=(NATIONAL_COVERAGE,),
        active_hours=(8, 20),
        estimated_response_minutes=180,
        requires_route_match=True,
        integration_status=IntegrationStatus.PENDING,
    ),
    ResponderPartner(
        type="FedEx",
        name="FedEx Drivers",
        coverage_areas=(NATIONAL_COVERAGE,),
        active_hours=(7, 20),
        estimated_response_minutes=180,
        requires_route_match=True,
        integration_status=IntegrationStatus.PENDING,
    ),
    ResponderPartner(
        type="Uber",
        name="Uber Drivers",
        coverage_areas=("urban", "suburban"),
        active_hours=(0, 24),
        estimated_response_minutes=30,
        requires_route_match=False,
        integration_status=IntegrationStatus.PENDING,
    ),
    ResponderPartner(
        type="Lyft",
        name="Lyft Drivers",
        coverage_areas=("urban", "suburban"),
        active_hours=(0, 24),
        estimated_response_minutes=30,
        requires_route_match=False,
        integration_status=IntegrationStatus.PENDING,
    ),
    ResponderPartner(
        type="Municipal_Staff",
        name="Municipal Workers",
        coverage_areas=("WV-GRE", "WV-KAN"),  # pilot counties
        active_hours=(6, 18),
        estimated_response_minutes=60,
        requires_route_match=False,
        integration_status=IntegrationStatus.ACTIVE,
    ),
    ResponderPartner(
        type="Animal_Control",
        name="Animal Control Officers",
        coverage_areas=("WV-GRE", "WV-KAN"),
        active_hours=(8, 17),
        estimated_response_minutes=45,
        requires_route_match=False,
        integration_status=IntegrationStatus.ACTIVE,
    ),
)

PUBLIC_DISPLAY_PARTNERS: tuple[PublicDisplayPartner, ...] = (
    PublicDisplayPartner(
        type="gas_station_screen",
        name="Gas Station Digital Displays",
        location_count=0,
        coverage_areas=("WV-GRE", "WV-KAN"),
        display_duration_seconds=15,
        rotation_slots=6,
        integration_status=IntegrationStatus.PILOT,
    ),
    PublicDisplayPartner(
        type="community_kiosk",
        name="Community Information Kiosks",
        location_count=0,
        coverage_areas=("WV-GRE", "WV-KAN"),
        display_duration_seconds=30,
        rotation_slots=4,
        integration_status=IntegrationStatus.PENDING,
    ),
    PublicDisplayPartner(
        type="digital_billboard",
        name="Digital Billboards",
        location_count=0,
        coverage_areas=(),
        display_duration_seconds=8,
        rotation_slots=8,
        integration_status=IntegrationStatus.PENDING,
    ),
)

CAMERA_IOT_PARTNERS: tuple[CameraIoTPartner, ...] = (
    CameraIoTPartner(
        type="ring_doorbell",
        name="Ring Neighbors",
        partner_api="ring_neighbors_api",
        supports_geofence_alert=True,
        supports_image_match=False,
        privacy_compliant=True,
        integration_status=IntegrationStatus.PENDING,
    ),
    CameraIoTPartner(
        type="community_camera",
        name="Community Security Cameras",
        partner_api="community_cam_api",
        supports_geofence_alert=True,
        supports_image_match=True,
        privacy_compliant=True,
        integration_status=IntegrationStatus.PILOT,
    ),
)


def covers_area(coverage_areas: tuple[str, ...], areas: tuple[str, ...]) -> bool:
    """True if a partner's coverage includes any of the given areas.

    Pure function.
    """
    if NATIONAL_COVERAGE in coverage_areas:
        return True
    return any(area in coverage_areas for area in areas)


def is_active_at(partner: ResponderPartner, hour: int) -> bool:
    """True if a responder works at the given local hour.

    Pure function.
    """
    start, end = partner.active_hours
    return start <= hour % 24 < end


def active_responders(areas: tuple[str, ...], hour: int) -> list[ResponderPartner]:
    """Live responders covering an area and working at this hour.

    Pure function.

    Args:
        areas: County code and/or environment tag of the case
        hour: Local hour of day (0-23)

    Returns:
        Matching responders, fastest response first
    """
    matches = [
        p for p in RESPONDER_PARTNERS
        if p.integration_status in LIVE_STATUSES
        and covers_area(p.coverage_areas, areas)
        and is_active_at(p, hour)
    ]
    return sorted(matches, key=lambda p: p.estimated_response_minutes)


def display_partners_for(areas: tuple[str, ...]) -> list[PublicDisplayPartner]:
    """Live public display partners covering an area.

    Pure function.
    """
    return [
        p for p in PUBLIC_DISPLAY_PARTNERS
        if p.integration_status in LIVE_STATUSES
        and covers_area(p.coverage_areas, areas)
    ]


def camera_partners_with_geofence_alerts() -> list[CameraIoTPartner]:
    """Live, privacy-compliant camera partners that accept geofence alerts.

    Pure function.
    """
    return [
        p for p in CAMERA_IOT_PARTNERS
        if p.integration_status in LIVE_STATUSES
        and p.supports_geofence_alert
        and p.privacy_compliant
    ]


def partners_for_channel(
    channel_id: ChannelId,
    areas: tuple[str, ...],
    hour: int,
) -> list[str]:
    """Names of partners that can carry an alert on a channel.

    Pure function. Channels without a partner roster return an empty list.
    """
    if channel_id == ChannelId.RESPONDER_NETWORK:
        return [p.name for p in active_responders(areas, hour)]
    if channel_id == ChannelId.PUBLIC_DISPLAY:
        return [p.name for p in display_partners_for(areas)]
    if channel_id == ChannelId.CAMERA_IOT:
        return [p.name for p in camera_partners_with_geofence_alerts()]
    return []
