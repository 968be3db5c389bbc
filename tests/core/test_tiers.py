"""Tests for alert tier recommendation."""

import pytest

from petsearch.core.geo import Point
from petsearch.core.geofence import GeofenceResult
from petsearch.core.tiers import AlertTier, recommend_alert_tier


def make_geofence(confidence: float = 0.75) -> GeofenceResult:
    return GeofenceResult(
        center=Point(38.35, -81.63),
        radius_meters=1000,
        confidence=confidence,
        model="Dog Model",
        expanded_from_original=False,
        recentered_on_sighting=False,
        urgency_factor=1.0,
        next_expansion_hours=6,
    )


class TestAlertTier:
    """Tests for AlertTier ordering."""

    def test_total_order(self):
        assert AlertTier.T0 < AlertTier.T1 < AlertTier.T2 < AlertTier.T3 < AlertTier.T4 < AlertTier.T5

    def test_str_is_name(self):
        assert str(AlertTier.T3) == "T3"


class TestRecommendAlertTier:
    """Tests for recommend_alert_tier function."""

    def test_human_reviewed_high_confidence(self):
        result = recommend_alert_tier(
            make_geofence(0.75), hours_since_lost=1, evidence_strength=0.9,
            human_review_complete=True,
        )

        assert result.tier == AlertTier.T4
        assert result.reason == "Human-reviewed, high-confidence case"

    def test_regional_crisis_overrides_everything(self):
        result = recommend_alert_tier(
            make_geofence(0.2), hours_since_lost=0, evidence_strength=0.0,
            is_regional_crisis=True,
        )

        assert result.tier == AlertTier.T5
        assert result.reason == "Regional crisis declared"

    def test_low_confidence_review_falls_through(self):
        result = recommend_alert_tier(
            make_geofence(0.69), hours_since_lost=1, evidence_strength=0.9,
            human_review_complete=True,
        )

        assert result.tier == AlertTier.T2

    def test_shelter_confirmed(self):
        result = recommend_alert_tier(
            make_geofence(), hours_since_lost=0, evidence_strength=0.0,
            shelter_confirmed=True,
        )

        assert result.tier == AlertTier.T3
        assert result.reason == "Shelter-confirmed case"

    def test_strong_evidence_after_six_hours(self):
        result = recommend_alert_tier(make_geofence(), hours_since_lost=6, evidence_strength=0.6)

        assert result.tier == AlertTier.T3
        assert result.reason == "Strong evidence, time threshold met"

    def test_strong_evidence_too_early(self):
        result = recommend_alert_tier(make_geofence(), hours_since_lost=5.9, evidence_strength=0.6)

        assert result.tier == AlertTier.T2
        assert result.reason == "Evidence strength or time threshold met"

    def test_time_alone_reaches_t2(self):
        result = recommend_alert_tier(make_geofence(), hours_since_lost=4, evidence_strength=0.0)
        assert result.tier == AlertTier.T2

    def test_basic_case(self):
        result = recommend_alert_tier(make_geofence(), hours_since_lost=1, evidence_strength=0.2)

        assert result.tier == AlertTier.T1
        assert result.reason == "Basic case requirements met"

    def test_incomplete_case(self):
        result = recommend_alert_tier(make_geofence(), hours_since_lost=1, evidence_strength=0.1)

        assert result.tier == AlertTier.T0
        assert result.reason == "Case incomplete or insufficient evidence"

    @pytest.mark.parametrize("shelter", [False, True])
    @pytest.mark.parametrize("review", [False, True])
    @pytest.mark.parametrize("confidence", [0.5, 0.9])
    def test_monotonic_in_evidence_and_time(self, shelter, review, confidence):
        geofence = make_geofence(confidence)
        evidence_steps = [0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]
        hour_steps = [0, 1, 3, 4, 5, 6, 12, 48]

        for hours in hour_steps:
            previous = AlertTier.T0
            for evidence in evidence_steps:
                tier = recommend_alert_tier(geofence, hours, evidence, shelter, review).tier
                assert tier >= previous
                previous = tier

        for evidence in evidence_steps:
            previous = AlertTier.T0
            for hours in hour_steps:
                tier = recommend_alert_tier(geofence, hours, evidence, shelter, review).tier
                assert tier >= previous
                previous = tier
