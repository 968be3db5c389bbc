"""Alert channel admission control - Pure functions.

Seven notification channels, each gated by tier, consent, verification,
human review, partner contract and a daily rate limit:

    1. Mobile Push        - opt-in users, pet owners, community members
    2. SMS                - high-urgency verified cases only
    3. Email              - low urgency summaries, follow-ups
    4. Shelter Console    - operational inbox for shelter staff
    5. Responder Network  - delivery drivers, rideshare, municipal staff
    6. Public Displays    - gas stations, kiosks, digital billboards
    7. Camera/IoT         - doorbell and community camera networks

Every unmet requirement is reported, not just the first. All functions
are pure with no side effects.
"""

import math
from dataclasses import dataclass, field
from enum import Enum

from petsearch.core.tiers import AlertTier


class ChannelId(str, Enum):
    PUSH = "push"
    SMS = "sms"
    EMAIL = "email"
    SHELTER_CONSOLE = "shelter_console"
    RESPONDER_NETWORK = "responder_network"
    PUBLIC_DISPLAY = "public_display"
    CAMERA_IOT = "camera_iot"


class UrgencyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Accepted in place of a channel id to evaluate every channel
ALL_CHANNELS = "all"

ALL_REQUIREMENTS_MET = "All requirements met"


@dataclass(frozen=True)
class ChannelConfig:
    """Static admission rules for one channel."""
    id: ChannelId
    name: str
    description: str
    min_tier: AlertTier
    requires_consent: bool
    requires_verification: bool
    requires_human_review: bool
    requires_partner_contract: bool
    default_ttl_hours: int
    max_ttl_hours: int
    rate_limit_per_day: int
    urgency_level: UrgencyLevel


@dataclass(frozen=True)
class ChannelEligibility:
    """Outcome of checking one channel.

    Attributes:
        channel_id: Channel checked
        eligible: True only if no blockers remain
        reason: 'All requirements met' or the first blocker
        blockers: Every unmet requirement, in check order
    """
    channel_id: ChannelId
    eligible: bool
    reason: str
    blockers: tuple[str, ...] = field(default_factory=tuple)


CHANNEL_CONFIGS: dict[ChannelId, ChannelConfig] = {
    ChannelId.PUSH: ChannelConfig(
        id=ChannelId.PUSH,
        name="Mobile Push",
        description="Opt-in users, pet owners, community members",
        min_tier=AlertTier.T1,
        requires_consent=True,
        requires_verification=False,
        requires_human_review=False,
        requires_partner_contract=False,
        default_ttl_hours=4,
        max_ttl_hours=12,
        rate_limit_per_day=10,
        urgency_level=UrgencyLevel.MEDIUM,
    ),
    ChannelId.SMS: ChannelConfig(
        id=ChannelId.SMS,
        name="SMS",
        description="High-urgency verified cases only",
        min_tier=AlertTier.T2,
        requires_consent=True,
        requires_verification=True,
        requires_human_review=False,
        requires_partner_contract=False,
        default_ttl_hours=2,
        max_ttl_hours=6,
        rate_limit_per_day=3,
        urgency_level=UrgencyLevel.HIGH,
    ),
    ChannelId.EMAIL: ChannelConfig(
        id=ChannelId.EMAIL,
        name="Email",
        description="Low urgency summaries, follow-ups",
        min_tier=AlertTier.T1,
        requires_consent=True,
        requires_verification=False,
        requires_human_review=False,
        requires_partner_contract=False,
        default_ttl_hours=12,
        max_ttl_hours=48,
        rate_limit_per_day=5,
        urgency_level=UrgencyLevel.LOW,
    ),
    ChannelId.SHELTER_CONSOLE: ChannelConfig(
        id=ChannelId.SHELTER_CONSOLE,
        name="Shelter Console",
        description="Operational inbox for shelter staff",
        min_tier=AlertTier.T1,
        requires_consent=False,  # shelters opt in at org level
        requires_verification=False,
        requires_human_review=False,
        requires_partner_contract=True,
        default_ttl_hours=24,
        max_ttl_hours=72,
        rate_limit_per_day=50,
        urgency_level=UrgencyLevel.MEDIUM,
    ),
    ChannelId.RESPONDER_NETWORK: ChannelConfig(
        id=ChannelId.RESPONDER_NETWORK,
        name="Responder Network",
        description="USPS, UPS, FedEx, Uber, Lyft, municipal staff",
        min_tier=AlertTier.T3,
        requires_consent=False,  # partner-level agreement
        requires_verification=True,
        requires_human_review=False,
        requires_partner_contract=True,
        default_ttl_hours=4,
        max_ttl_hours=8,
        rate_limit_per_day=20,
        urgency_level=UrgencyLevel.HIGH,
    ),
    ChannelId.PUBLIC_DISPLAY: ChannelConfig(
        id=ChannelId.PUBLIC_DISPLAY,
        name="Public Display Network",
        description="Gas stations, kiosks, digital billboards",
        min_tier=AlertTier.T4,
        requires_consent=False,
        requires_verification=True,
        requires_human_review=True,
        requires_partner_contract=True,
        default_ttl_hours=6,
        max_ttl_hours=12,
        rate_limit_per_day=5,
        urgency_level=UrgencyLevel.HIGH,
    ),
    ChannelId.CAMERA_IOT: ChannelConfig(
        id=ChannelId.CAMERA_IOT,
        name="Camera/IoT Network",
        description="Ring-style ecosystems, smart cameras",
        min_tier=AlertTier.T3,
        requires_consent=False,  # partner-level
        requires_verification=True,
        requires_human_review=False,
        requires_partner_contract=True,
        default_ttl_hours=8,
        max_ttl_hours=24,
        rate_limit_per_day=10,
        urgency_level=UrgencyLevel.MEDIUM,
    ),
}


def parse_channel_ids(value: str | list[str]) -> list[ChannelId]:
    """Parse 'all', a single id or a list of ids.

    Pure function.

    Raises:
        ValueError: If any id is unknown
    """
    if isinstance(value, str):
        if value == ALL_CHANNELS:
            return list(CHANNEL_CONFIGS)
        value = [value]

    return [ChannelId(v) for v in value]


def check_channel_eligibility(
    channel_id: ChannelId,
    tier: AlertTier,
    has_consent: bool,
    is_verified: bool,
    has_human_review: bool,
    has_partner_contract: bool,
    alerts_today: int,
) -> ChannelEligibility:
    """Check if a case is eligible for a specific channel.

    Pure function.

    Args:
        channel_id: Channel to check
        tier: Current case tier
        has_consent: Recipient consent is on file
        is_verified: Case has been verified
        has_human_review: A moderator reviewed the case
        has_partner_contract: A partner contract covers this channel
        alerts_today: Alerts already sent on this channel today

    Returns:
        ChannelEligibility with every blocker found
    """
    config = CHANNEL_CONFIGS[channel_id]
    blockers: list[str] = []

    if tier < config.min_tier:
        blockers.append(f"Requires tier {config.min_tier.name} or higher")

    if config.requires_consent and not has_consent:
        blockers.append("User consent required")

    if config.requires_verification and not is_verified:
        blockers.append("Case verification required")

    if config.requires_human_review and not has_human_review:
        blockers.append("Human review required")

    if config.requires_partner_contract and not has_partner_contract:
        blockers.append("Partner contract required")

    if alerts_today >= config.rate_limit_per_day:
        blockers.append(f"Rate limit exceeded ({config.rate_limit_per_day}/day)")

    return ChannelEligibility(
        channel_id=channel_id,
        eligible=not blockers,
        reason=blockers[0] if blockers else ALL_REQUIREMENTS_MET,
        blockers=tuple(blockers),
    )


def get_eligible_channels(
    tier: AlertTier,
    has_consent: bool,
    is_verified: bool,
    has_human_review: bool,
    partner_contracts: set[ChannelId] | frozenset[ChannelId],
    alert_count_by_channel: dict[ChannelId, int],
    channel_ids: list[ChannelId] | None = None,
) -> list[ChannelEligibility]:
    """Check every channel for a case.

    Pure function. Channels are checked independently; one channel's
    blockers never affect another.

    Args:
        tier: Current case tier
        has_consent: Recipient consent is on file
        is_verified: Case has been verified
        has_human_review: A moderator reviewed the case
        partner_contracts: Channels covered by a partner contract
        alert_count_by_channel: Alerts already sent today, per channel
        channel_ids: Channels to check (default: all)

    Returns:
        One ChannelEligibility per channel, in channel order
    """
    if channel_ids is None:
        channel_ids = list(CHANNEL_CONFIGS)

    return [
        check_channel_eligibility(
            channel_id=channel_id,
            tier=tier,
            has_consent=has_consent,
            is_verified=is_verified,
            has_human_review=has_human_review,
            has_partner_contract=channel_id in partner_contracts,
            alerts_today=alert_count_by_channel.get(channel_id, 0),
        )
        for channel_id in channel_ids
    ]


def resolve_ttl_hours(channel_id: ChannelId, requested_hours: float | None = None) -> float:
    """How long an alert on a channel should stay live.

    Pure function. Uses the channel default when nothing is requested and
    never exceeds the channel maximum. A NaN request counts as no request.
    """
    config = CHANNEL_CONFIGS[channel_id]
    if requested_hours is None or math.isnan(requested_hours) or requested_hours <= 0:
        return config.default_ttl_hours

    return min(requested_hours, config.max_ttl_hours)
