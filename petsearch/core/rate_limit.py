"""Per-channel daily rate limiting - Pure functions.

This module decides whether another alert fits under a channel's daily
limit and tracks counts as immutable snapshots. Atomic storage of the
counters is handled by the shell layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from petsearch.core.channels import CHANNEL_CONFIGS, ChannelId


@dataclass(frozen=True)
class DailyAlertCounts:
    """Alert counts for one day.

    Attributes:
        day: Day key (YYYY-MM-DD, UTC)
        alerts_per_channel: Count of alerts sent on each channel that day
    """
    day: str
    alerts_per_channel: dict[ChannelId, int] = field(default_factory=dict)

    def count(self, channel_id: ChannelId) -> int:
        return self.alerts_per_channel.get(channel_id, 0)


@dataclass(frozen=True)
class RateLimitResult:
    """Result of checking rate limits.

    Attributes:
        allowed: Whether the alert is allowed
        reason: Reason if not allowed (None if allowed)
        channel_count: Current channel alert count
        limit: Channel daily limit
    """
    allowed: bool
    reason: str | None
    channel_count: int
    limit: int


@dataclass(frozen=True)
class RateLimitViolation:
    """A channel that has used up its daily limit."""
    channel_id: ChannelId
    current_count: int
    max_allowed: int
    message: str


def day_key(now: datetime) -> str:
    """Bucket a timestamp into its UTC day.

    Pure function. Naive datetimes are taken to be UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%d")


def rate_limit_message(limit: int) -> str:
    return f"Rate limit exceeded ({limit}/day)"


def check_rate_limit(
    channel_id: ChannelId,
    channel_count: int,
) -> RateLimitResult:
    """Check if one more alert is allowed on a channel today.

    Pure function.

    Args:
        channel_id: Channel to send on
        channel_count: Alerts already sent on it today

    Returns:
        RateLimitResult indicating if the alert is allowed
    """
    limit = CHANNEL_CONFIGS[channel_id].rate_limit_per_day

    if channel_count >= limit:
        return RateLimitResult(
            allowed=False,
            reason=rate_limit_message(limit),
            channel_count=channel_count,
            limit=limit,
        )

    return RateLimitResult(
        allowed=True,
        reason=None,
        channel_count=channel_count,
        limit=limit,
    )


def record_alert(
    channel_id: ChannelId,
    counts: DailyAlertCounts,
) -> DailyAlertCounts:
    """Record an alert and return updated counts.

    Pure function - returns new counts without modifying input.
    """
    new_channel_counts = dict(counts.alerts_per_channel)
    new_channel_counts[channel_id] = new_channel_counts.get(channel_id, 0) + 1

    return DailyAlertCounts(day=counts.day, alerts_per_channel=new_channel_counts)


def get_violations(counts: DailyAlertCounts) -> list[RateLimitViolation]:
    """Get every channel that has reached its daily limit.

    Pure function.
    """
    violations = []

    for channel_id, count in counts.alerts_per_channel.items():
        limit = CHANNEL_CONFIGS[channel_id].rate_limit_per_day
        if count >= limit:
            violations.append(RateLimitViolation(
                channel_id=channel_id,
                current_count=count,
                max_allowed=limit,
                message=f"Channel '{channel_id.value}' rate limit reached: {count}/{limit} alerts on {counts.day}",
            ))

    return violations


def format_violation_message(violations: list[RateLimitViolation]) -> str:
    """Format violations into a human-readable message.

    Pure function.
    """
    if not violations:
        return ""

    lines = ["Rate limit violations detected:"]
    for v in violations:
        lines.append(f"  - {v.message}")

    return "\n".join(lines)
