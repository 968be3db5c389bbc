"""Alert tier recommendation - Pure functions.

This module maps a geofence and case metadata to one of six ordered
escalation tiers. Rules are evaluated top to bottom and the first match
wins:

    T5  Regional crisis declared
    T4  Human-reviewed, high-confidence case (public displays)
    T3  Shelter-confirmed, or strong evidence after 6 hours (responders)
    T2  Moderate evidence, or 4 hours elapsed (expanded search)
    T1  Basic case requirements met (local alert)
    T0  Draft / incomplete

All functions are pure with no side effects.
"""

from dataclasses import dataclass
from enum import IntEnum

from petsearch.core.geofence import GeofenceResult


class AlertTier(IntEnum):
    """Escalation tiers - integer ordering enables comparison."""
    T0 = 0  # Draft / incomplete
    T1 = 1  # Local alert
    T2 = 2  # Expanded search
    T3 = 3  # Responder network
    T4 = 4  # Public display
    T5 = 5  # Regional crisis

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TierRecommendation:
    """Recommended tier with a short reason."""
    tier: AlertTier
    reason: str


def recommend_alert_tier(
    geofence: GeofenceResult,
    hours_since_lost: float,
    evidence_strength: float,
    shelter_confirmed: bool = False,
    human_review_complete: bool = False,
    is_regional_crisis: bool = False,
) -> TierRecommendation:
    """Recommend an alert tier for a case.

    Pure function.

    Args:
        geofence: Current geofence for the case
        hours_since_lost: Hours since the pet was lost
        evidence_strength: Strength of case evidence, 0-1
        shelter_confirmed: A shelter confirmed the case
        human_review_complete: A moderator reviewed the case
        is_regional_crisis: A regional crisis has been declared

    Returns:
        TierRecommendation
    """
    if is_regional_crisis:
        return TierRecommendation(AlertTier.T5, "Regional crisis declared")

    if human_review_complete and geofence.confidence >= 0.7 and evidence_strength >= 0.8:
        return TierRecommendation(AlertTier.T4, "Human-reviewed, high-confidence case")

    if shelter_confirmed:
        return TierRecommendation(AlertTier.T3, "Shelter-confirmed case")

    if evidence_strength >= 0.6 and hours_since_lost >= 6:
        return TierRecommendation(AlertTier.T3, "Strong evidence, time threshold met")

    if evidence_strength >= 0.4 or hours_since_lost >= 4:
        return TierRecommendation(AlertTier.T2, "Evidence strength or time threshold met")

    if evidence_strength >= 0.2:
        return TierRecommendation(AlertTier.T1, "Basic case requirements met")

    return TierRecommendation(AlertTier.T0, "Case incomplete or insufficient evidence")
