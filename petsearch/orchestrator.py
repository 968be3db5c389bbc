"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components. It's the "glue" that
makes the application work.

One evaluation runs the escalation pipeline:

    weather -> geofence -> tier -> channel eligibility
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from petsearch.core.case import LocationContext, PetProfile, SightingCluster
from petsearch.core.channels import (
    ChannelEligibility,
    ChannelId,
    get_eligible_channels,
)
from petsearch.core.config import Config
from petsearch.core.geo import Point
from petsearch.core.geofence import (
    EllipticalSearchArea,
    GeofenceResult,
    compute_wind_adjusted_geofence,
    weather_channel_preference,
)
from petsearch.core.partners import partners_for_channel
from petsearch.core.rate_limit import (
    RateLimitResult,
    day_key,
    format_violation_message,
    get_violations,
)
from petsearch.core.telemetry import compute_search_outcome, format_telemetry_report
from petsearch.core.tiers import TierRecommendation, recommend_alert_tier
from petsearch.core.weather import WeatherSnapshot, WindData, WindTravelBias
from petsearch.shell.counter_store import AlertCounterStore, create_counter_store
from petsearch.shell.telemetry_client import TelemetryClient, TelemetryReporter
from petsearch.shell.weather_client import WeatherClient


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class EscalationRequest:
    """Everything needed to evaluate one case.

    Attributes:
        case_id: Case identifier (used for telemetry and logs)
        original_location: Last known location
        pet: Pet profile
        context: Location context
        hours_since_lost: Hours since the pet was lost
        evidence_strength: Strength of case evidence, 0-1
        sighting_clusters: Pre-aggregated sighting clusters
        wind: Caller-supplied wind; skips the weather fetch
        weather_payload: Pre-fetched raw provider payload; skips the fetch
        shelter_confirmed: A shelter confirmed the case
        human_review_complete: A moderator reviewed the case
        is_regional_crisis: A regional crisis has been declared
        has_consent: Recipient consent is on file
        is_verified: Case has been verified
        partner_contracts: Channels covered by a partner contract
        channel_ids: Channels to evaluate (None for all)
        coverage_area: County code used to match partners
        local_hour: Local hour of day for partner schedules
    """
    case_id: str
    original_location: Point
    pet: PetProfile
    context: LocationContext
    hours_since_lost: float
    evidence_strength: float
    sighting_clusters: tuple[SightingCluster, ...] = ()
    wind: WindData | None = None
    weather_payload: dict | None = None
    shelter_confirmed: bool = False
    human_review_complete: bool = False
    is_regional_crisis: bool = False
    has_consent: bool = False
    is_verified: bool = False
    partner_contracts: frozenset[ChannelId] = frozenset()
    channel_ids: tuple[ChannelId, ...] | None = None
    coverage_area: str | None = None
    local_hour: int | None = None


@dataclass
class EscalationDecision:
    """Result of evaluating one case.

    Attributes:
        case_id: Case identifier
        geofence: Circular search area
        ellipse: Wind-stretched search area (None in calm or unknown wind)
        wind_bias: Directional travel bias (None in calm or unknown wind)
        tier: Recommended tier and reason
        channels: Eligibility of every evaluated channel
        weather: Weather snapshot used, if one was fetched or supplied
        wind: Wind used for the decision
        channel_preference: 'standard', 'responder' or 'emergency'
        partners: Reachable partner names per eligible partner channel
    """
    case_id: str
    geofence: GeofenceResult
    ellipse: EllipticalSearchArea | None
    wind_bias: WindTravelBias | None
    tier: TierRecommendation
    channels: list[ChannelEligibility]
    weather: WeatherSnapshot | None = None
    wind: WindData | None = None
    channel_preference: str = "standard"
    partners: dict[ChannelId, list[str]] = field(default_factory=dict)

    @property
    def eligible_channels(self) -> list[ChannelId]:
        return [c.channel_id for c in self.channels if c.eligible]

    @property
    def summary(self) -> str:
        """Human-readable summary of the decision."""
        eligible = ", ".join(c.value for c in self.eligible_channels) or "none"
        return (
            f"Case {self.case_id}: {self.tier.tier.name} ({self.tier.reason}), "
            f"radius {self.geofence.radius_meters}m, "
            f"confidence {self.geofence.confidence:.2f}, "
            f"eligible channels: {eligible}"
        )


class Orchestrator:
    """Coordinates lost-pet escalation decisions.

    This class wires together:
    - Weather client (fetches current wind and conditions)
    - Core functions (geofence, tier, channel eligibility, partners)
    - Alert counter store (per-channel daily limits)
    - Telemetry reporter (fire-and-forget correlation reports)
    """

    def __init__(
        self,
        config: Config,
        weather_client: WeatherClient | None = None,
        counter_store: AlertCounterStore | None = None,
        telemetry_reporter: TelemetryReporter | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            weather_client: Weather client (created if not provided)
            counter_store: Alert counter store (created if not provided)
            telemetry_reporter: Telemetry reporter (created if not provided)
            clock: Returns the current time; injectable for tests
        """
        self.config = config
        self.weather_client = weather_client or WeatherClient(config.weather)
        self.counter_store = counter_store or create_counter_store(config.counters)
        self.telemetry_reporter = telemetry_reporter or TelemetryReporter(
            TelemetryClient(config.telemetry)
        )
        self.clock = clock

    def _resolve_weather(
        self,
        request: EscalationRequest,
    ) -> tuple[WeatherSnapshot | None, WindData | None]:
        """Pick the wind for a request.

        Caller-supplied wind wins, then a supplied payload, then a fetch.
        """
        if request.wind is not None:
            return None, request.wind

        if request.weather_payload is not None:
            snapshot = self.weather_client.snapshot_from_payload(
                request.original_location,
                request.weather_payload,
            )
        else:
            snapshot = self.weather_client.fetch_snapshot(request.original_location)

        if snapshot is None:
            logger.info("No weather for case %s, assuming calm", request.case_id)
            return None, None

        return snapshot, snapshot.wind

    def _coverage_areas(self, request: EscalationRequest) -> tuple[str, ...]:
        areas = [request.context.environment.value]
        area = request.coverage_area or self.config.default_coverage_area
        if area:
            areas.insert(0, area)
        return tuple(areas)

    def _find_partners(
        self,
        request: EscalationRequest,
        channels: list[ChannelEligibility],
        now: datetime,
    ) -> dict[ChannelId, list[str]]:
        """List reachable partners for every eligible channel that has a roster."""
        hour = request.local_hour if request.local_hour is not None else now.hour
        areas = self._coverage_areas(request)

        partners: dict[ChannelId, list[str]] = {}
        for channel in channels:
            if not channel.eligible:
                continue
            names = partners_for_channel(channel.channel_id, areas, hour)
            if names:
                partners[channel.channel_id] = names

        return partners

    def evaluate(self, request: EscalationRequest) -> EscalationDecision:
        """Run the escalation pipeline for one case.

        Weather and telemetry failures never fail the evaluation.

        Args:
            request: Validated case input

        Returns:
            EscalationDecision
        """
        now = self.clock()
        logger.info(
            "Evaluating case %s: %s lost %.1fh ago",
            request.case_id,
            request.pet.species.value,
            request.hours_since_lost,
        )

        snapshot, wind = self._resolve_weather(request)

        # Pure core functions
        adjusted = compute_wind_adjusted_geofence(
            original_location=request.original_location,
            pet=request.pet,
            context=request.context,
            hours_since_lost=request.hours_since_lost,
            sighting_clusters=list(request.sighting_clusters),
            wind=wind,
        )

        tier = recommend_alert_tier(
            geofence=adjusted.geofence,
            hours_since_lost=request.hours_since_lost,
            evidence_strength=request.evidence_strength,
            shelter_confirmed=request.shelter_confirmed,
            human_review_complete=request.human_review_complete,
            is_regional_crisis=request.is_regional_crisis,
        )

        counts = self.counter_store.counts_for_day(day_key(now))
        violations = get_violations(counts)
        if violations:
            logger.warning(format_violation_message(violations))

        channels = get_eligible_channels(
            tier=tier.tier,
            has_consent=request.has_consent,
            is_verified=request.is_verified,
            has_human_review=request.human_review_complete,
            partner_contracts=request.partner_contracts,
            alert_count_by_channel=counts.alerts_per_channel,
            channel_ids=list(request.channel_ids) if request.channel_ids is not None else None,
        )

        decision = EscalationDecision(
            case_id=request.case_id,
            geofence=adjusted.geofence,
            ellipse=adjusted.ellipse,
            wind_bias=adjusted.wind_bias,
            tier=tier,
            channels=channels,
            weather=snapshot,
            wind=wind,
            channel_preference=weather_channel_preference(request.context.weather_condition),
            partners=self._find_partners(request, channels, now),
        )

        self.telemetry_reporter.report(format_telemetry_report(
            case_id=request.case_id,
            weather=snapshot,
            reported_at=now,
            system_name=self.config.telemetry.system_name,
            wind=wind,
        ))

        logger.info("Completed: %s", decision.summary)
        return decision

    def dispatch(self, channel_id: ChannelId) -> RateLimitResult:
        """Reserve one of today's alert slots on a channel.

        Call once per alert actually sent; the reservation is atomic.

        Returns:
            RateLimitResult; allowed is False when the limit is reached
        """
        result = self.counter_store.try_increment(channel_id, day_key(self.clock()))
        if not result.allowed:
            logger.warning("Dispatch on %s refused: %s", channel_id.value, result.reason)
        return result

    def report_outcome(
        self,
        case_id: str,
        last_known: Point,
        found_at: Point | None,
        wind: WindData | None = None,
    ) -> None:
        """Report how a search ended, for weather correlation."""
        self.telemetry_reporter.report(format_telemetry_report(
            case_id=case_id,
            weather=None,
            reported_at=self.clock(),
            system_name=self.config.telemetry.system_name,
            outcome=compute_search_outcome(last_known, found_at),
            wind=wind,
        ))
