"""Tests for case input parsing and validation."""

import pytest

from petsearch.core.case import (
    AgeClass,
    BehaviorProfile,
    Environment,
    InputValidationError,
    RoadDensity,
    Size,
    Species,
    TimeOfDay,
    WeatherCondition,
    parse_location_context,
    parse_pet_profile,
    parse_point,
    parse_sighting_clusters,
)
from petsearch.core.geo import Point


@pytest.fixture
def cluster_data():
    """A valid raw sighting cluster."""
    return {
        "centroid": {"lat": 38.35, "lng": -81.63},
        "count": 3,
        "avg_recency_hours": 2,
        "trust_score": 75,
        "radius_meters": 150,
    }


class TestParsePoint:
    """Tests for parse_point function."""

    def test_parses_valid_point(self):
        assert parse_point({"lat": 38.35, "lng": -81.63}) == Point(38.35, -81.63)

    def test_accepts_numeric_strings(self):
        assert parse_point({"lat": "38.35", "lng": "-81.63"}) == Point(38.35, -81.63)

    def test_rejects_out_of_range_latitude(self):
        with pytest.raises(InputValidationError) as exc_info:
            parse_point({"lat": 95, "lng": 0})

        assert exc_info.value.errors[0].field == "location"
        assert "Latitude" in exc_info.value.errors[0].message

    def test_rejects_missing_point(self):
        with pytest.raises(InputValidationError):
            parse_point(None)

    def test_rejects_non_finite(self):
        with pytest.raises(InputValidationError) as exc_info:
            parse_point({"lat": "nan", "lng": -81.63})

        assert exc_info.value.errors[0].field == "location.lat"

    def test_rejects_non_numeric(self):
        with pytest.raises(InputValidationError) as exc_info:
            parse_point({"lat": "north", "lng": 0}, "origin")

        assert exc_info.value.errors[0].field == "origin.lat"


class TestParsePetProfile:
    """Tests for parse_pet_profile function."""

    def test_parses_minimal_profile_with_defaults(self):
        pet = parse_pet_profile({"species": "dog", "behavior": "flight_risk"})

        assert pet.species == Species.DOG
        assert pet.behavior == BehaviorProfile.FLIGHT_RISK
        assert pet.age == AgeClass.ADULT
        assert pet.size == Size.MEDIUM
        assert pet.medical_needs is False
        assert pet.known_range_meters is None

    def test_parses_full_profile(self):
        pet = parse_pet_profile({
            "species": "cat",
            "behavior": "indoor_only",
            "age": "senior",
            "size": "small",
            "medical_needs": True,
            "known_range_meters": 300,
        })

        assert pet.species == Species.CAT
        assert pet.age == AgeClass.SENIOR
        assert pet.medical_needs is True
        assert pet.known_range_meters == 300.0

    def test_collects_every_error(self):
        """All bad fields are reported together."""
        with pytest.raises(InputValidationError) as exc_info:
            parse_pet_profile({"species": "dragon", "age": "ancient"})

        fields = {e.field for e in exc_info.value.errors}
        assert fields == {"pet.species", "pet.behavior", "pet.age"}

    def test_rejects_negative_known_range(self):
        with pytest.raises(InputValidationError) as exc_info:
            parse_pet_profile({"species": "dog", "behavior": "outdoor_access", "known_range_meters": -5})

        assert exc_info.value.errors[0].field == "pet.known_range_meters"

    @pytest.mark.parametrize("known_range", ["NaN", float("nan"), "inf"])
    def test_rejects_non_finite_known_range(self, known_range):
        with pytest.raises(InputValidationError) as exc_info:
            parse_pet_profile({"species": "dog", "behavior": "outdoor_access", "known_range_meters": known_range})

        assert exc_info.value.errors[0].field == "pet.known_range_meters"

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_pet_profile({})


class TestParseLocationContext:
    """Tests for parse_location_context function."""

    def test_parses_with_defaults(self):
        context = parse_location_context({"environment": "rural"})

        assert context.environment == Environment.RURAL
        assert context.road_density == RoadDensity.MEDIUM
        assert context.weather_condition == WeatherCondition.NORMAL
        assert context.time_of_day == TimeOfDay.DAY
        assert context.near_water is False

    def test_rejects_unknown_weather_condition(self):
        with pytest.raises(InputValidationError) as exc_info:
            parse_location_context({"environment": "urban", "weather_condition": "hurricane"})

        assert exc_info.value.errors[0].field == "context.weather_condition"

    def test_rejects_string_flags(self):
        with pytest.raises(InputValidationError) as exc_info:
            parse_location_context({"environment": "rural", "near_water": "false", "near_highway": "no"})

        fields = {e.field for e in exc_info.value.errors}
        assert fields == {"context.near_water", "context.near_highway"}

    def test_requires_environment(self):
        with pytest.raises(InputValidationError):
            parse_location_context({})


class TestParseSightingClusters:
    """Tests for parse_sighting_clusters function."""

    def test_parses_valid_cluster(self, cluster_data):
        clusters = parse_sighting_clusters([cluster_data])

        assert len(clusters) == 1
        assert clusters[0].centroid == Point(38.35, -81.63)
        assert clusters[0].count == 3
        assert clusters[0].trust_score == 75

    def test_empty_list(self):
        assert parse_sighting_clusters([]) == []

    def test_rejects_trust_out_of_range(self, cluster_data):
        cluster_data["trust_score"] = 150

        with pytest.raises(InputValidationError) as exc_info:
            parse_sighting_clusters([cluster_data])

        assert exc_info.value.errors[0].field == "sighting_clusters[0].trust_score"

    def test_reports_index_of_bad_cluster(self, cluster_data):
        bad = dict(cluster_data, radius_meters=-1)

        with pytest.raises(InputValidationError) as exc_info:
            parse_sighting_clusters([cluster_data, bad])

        assert exc_info.value.errors[0].field == "sighting_clusters[1].radius_meters"

    @pytest.mark.parametrize("count", ["inf", "NaN", float("inf"), float("nan")])
    def test_rejects_non_finite_count(self, cluster_data, count):
        cluster_data["count"] = count

        with pytest.raises(InputValidationError) as exc_info:
            parse_sighting_clusters([cluster_data])

        assert exc_info.value.errors[0].field == "sighting_clusters[0].count"

    def test_rejects_non_finite_recency(self, cluster_data):
        cluster_data["avg_recency_hours"] = "inf"

        with pytest.raises(InputValidationError) as exc_info:
            parse_sighting_clusters([cluster_data])

        assert exc_info.value.errors[0].field == "sighting_clusters[0].avg_recency_hours"
