"""Tests for dynamic geofence computation."""

import math

import pytest

from petsearch.core.case import (
    BehaviorProfile,
    Environment,
    LocationContext,
    PetProfile,
    RoadDensity,
    SightingCluster,
    Species,
    WeatherCondition,
)
from petsearch.core.geo import Point
from petsearch.core.geofence import (
    SPECIES_MODELS,
    compute_dynamic_geofence,
    compute_wind_adjusted_geofence,
    create_search_area,
    find_best_sighting_cluster,
    geofences_overlap,
    weather_channel_preference,
)
from petsearch.core.weather import WindData


ORIGIN = Point(38.35, -81.63)


@pytest.fixture
def flight_risk_dog():
    return PetProfile(species=Species.DOG, behavior=BehaviorProfile.FLIGHT_RISK)


@pytest.fixture
def rural_highway_context():
    return LocationContext(environment=Environment.RURAL, road_density=RoadDensity.HIGH)


def make_cluster(
    count: int = 3,
    recency: float = 2.0,
    trust: float = 80.0,
    radius: float = 300.0,
    lat: float = 38.36,
) -> SightingCluster:
    return SightingCluster(
        centroid=Point(lat, -81.62),
        count=count,
        avg_recency_hours=recency,
        trust_score=trust,
        radius_meters=radius,
    )


class TestComputeDynamicGeofence:
    """Tests for compute_dynamic_geofence function."""

    def test_flight_risk_dog_in_rural_corridor(self, flight_risk_dog, rural_highway_context):
        """800 x 2.0 x 1.5 x 2.0 x 1.5 = 7200m, plus 10h x 200 x 1.3 = 2600m."""
        result = compute_dynamic_geofence(ORIGIN, flight_risk_dog, rural_highway_context, 10, [])

        assert result.radius_meters == 9800
        assert result.confidence == pytest.approx(0.6)
        assert result.model == "Dog Model"
        assert result.expanded_from_original is True
        assert result.recentered_on_sighting is False
        assert result.center == ORIGIN

    def test_indoor_cat_before_expansion_delay(self):
        """Indoor-only cats do not expand during the first 6 hours."""
        pet = PetProfile(species=Species.CAT, behavior=BehaviorProfile.INDOOR_ONLY)
        context = LocationContext(environment=Environment.URBAN)

        result = compute_dynamic_geofence(ORIGIN, pet, context, 3, [])

        assert result.radius_meters == 42
        assert result.confidence == pytest.approx(0.74)
        assert result.expanded_from_original is False

    def test_capped_at_species_maximum(self, flight_risk_dog, rural_highway_context):
        result = compute_dynamic_geofence(ORIGIN, flight_risk_dog, rural_highway_context, 500, [])

        assert result.radius_meters == SPECIES_MODELS[Species.DOG].max_radius_meters

    def test_negative_hours_treated_as_zero(self, flight_risk_dog, rural_highway_context):
        negative = compute_dynamic_geofence(ORIGIN, flight_risk_dog, rural_highway_context, -5, [])
        zero = compute_dynamic_geofence(ORIGIN, flight_risk_dog, rural_highway_context, 0, [])

        assert negative == zero
        assert negative.confidence == pytest.approx(0.8)

    def test_known_range_sets_floor(self):
        pet = PetProfile(
            species=Species.CAT,
            behavior=BehaviorProfile.INDOOR_ONLY,
            known_range_meters=400,
        )
        context = LocationContext(environment=Environment.URBAN)

        result = compute_dynamic_geofence(ORIGIN, pet, context, 0, [])

        assert result.radius_meters == 600

    def test_weather_changes_urgency_not_radius(self, flight_risk_dog):
        normal = LocationContext(environment=Environment.SUBURBAN)
        flood = LocationContext(environment=Environment.SUBURBAN, weather_condition=WeatherCondition.FLOOD)

        normal_result = compute_dynamic_geofence(ORIGIN, flight_risk_dog, normal, 5, [])
        flood_result = compute_dynamic_geofence(ORIGIN, flight_risk_dog, flood, 5, [])

        assert normal_result.radius_meters == flood_result.radius_meters
        assert normal_result.urgency_factor == 1.0
        assert flood_result.urgency_factor == 2.5

    def test_next_expansion_shrinks_with_time(self, flight_risk_dog, rural_highway_context):
        early = compute_dynamic_geofence(ORIGIN, flight_risk_dog, rural_highway_context, 0, [])
        late = compute_dynamic_geofence(ORIGIN, flight_risk_dog, rural_highway_context, 100, [])

        assert early.next_expansion_hours == 6
        assert late.next_expansion_hours == 1

    @pytest.mark.parametrize("species", list(Species))
    @pytest.mark.parametrize("behavior", list(BehaviorProfile))
    @pytest.mark.parametrize("environment", list(Environment))
    def test_radius_non_decreasing_in_time(self, species, behavior, environment):
        pet = PetProfile(species=species, behavior=behavior)
        context = LocationContext(environment=environment, road_density=RoadDensity.HIGH)
        max_radius = SPECIES_MODELS[species].max_radius_meters

        previous = 0
        for hours in [0, 1, 2, 4, 6, 8, 12, 24, 48, 96, 200]:
            result = compute_dynamic_geofence(ORIGIN, pet, context, hours, [])
            assert result.radius_meters >= previous
            assert 0 <= result.radius_meters <= max_radius
            previous = result.radius_meters

    @pytest.mark.parametrize("hours", [0, 5, 25, 100, 10000])
    @pytest.mark.parametrize("trust", [None, 60, 100])
    def test_confidence_bounds(self, flight_risk_dog, hours, trust):
        clusters = [] if trust is None else [make_cluster(trust=trust)]
        context = LocationContext(environment=Environment.SUBURBAN)

        result = compute_dynamic_geofence(ORIGIN, flight_risk_dog, context, hours, clusters)

        assert 0.2 <= result.confidence <= 1.0


class TestSightingClusters:
    """Tests for cluster selection and re-centering."""

    def test_recenters_and_contracts_on_valid_cluster(self, flight_risk_dog, rural_highway_context):
        cluster = make_cluster(radius=300)

        result = compute_dynamic_geofence(ORIGIN, flight_risk_dog, rural_highway_context, 10, [cluster])

        assert result.recentered_on_sighting is True
        assert result.center == cluster.centroid
        assert result.radius_meters == 600
        # 0.8 - 0.2 + 0.8
        assert result.confidence == 1.0

    def test_cluster_never_grows_radius(self):
        pet = PetProfile(species=Species.CAT, behavior=BehaviorProfile.INDOOR_ONLY)
        context = LocationContext(environment=Environment.URBAN)

        result = compute_dynamic_geofence(ORIGIN, pet, context, 0, [make_cluster(radius=5000)])

        assert result.radius_meters == 42
        assert result.recentered_on_sighting is True

    @pytest.mark.parametrize("cluster", [
        make_cluster(count=1),
        make_cluster(recency=24),
        make_cluster(trust=59),
    ])
    def test_invalid_cluster_is_ignored(self, flight_risk_dog, rural_highway_context, cluster):
        result = compute_dynamic_geofence(ORIGIN, flight_risk_dog, rural_highway_context, 10, [cluster])

        assert result.recentered_on_sighting is False
        assert result.center == ORIGIN
        assert result.radius_meters == 9800

    def test_boundary_values_qualify(self):
        cluster = make_cluster(count=2, recency=23.9, trust=60)
        assert find_best_sighting_cluster([cluster]) == cluster

    def test_prefers_trust_weighted_by_recency(self):
        stale_trusted = make_cluster(trust=100, recency=9, lat=38.30)    # score 10
        fresh = make_cluster(trust=70, recency=1, lat=38.31)             # score 35

        assert find_best_sighting_cluster([stale_trusted, fresh]) == fresh

    def test_tie_keeps_first(self):
        first = make_cluster(lat=38.30)
        second = make_cluster(lat=38.31)

        assert find_best_sighting_cluster([first, second]) == first

    def test_no_clusters(self):
        assert find_best_sighting_cluster([]) is None


class TestCreateSearchArea:
    """Tests for create_search_area function."""

    @pytest.mark.parametrize("wind", [None, WindData(speed=0, direction=0), WindData(speed=2.9, direction=90)])
    def test_calm_wind_is_circle(self, wind):
        area = create_search_area(ORIGIN, 1000, Species.DOG, wind)

        assert area.major_axis_meters == 1000
        assert area.minor_axis_meters == 1000
        assert area.eccentricity == 0
        assert area.wind_adjusted is False
        assert area.area_square_meters == pytest.approx(math.pi * 1000 ** 2)

    def test_strong_wind_stretches_dog_area(self):
        area = create_search_area(ORIGIN, 1000, Species.DOG, WindData(speed=20, direction=0))

        assert area.major_axis_meters == pytest.approx(1500)
        assert area.minor_axis_meters == pytest.approx(700)
        assert area.major_axis_bearing == 180
        assert area.eccentricity == pytest.approx(0.884, abs=0.001)
        assert area.circular_radius_equivalent == pytest.approx(math.sqrt(1500 * 700))
        assert area.wind_adjusted is True

    def test_cat_area_stays_round(self):
        area = create_search_area(ORIGIN, 1000, Species.CAT, WindData(speed=20, direction=0))

        assert area.major_axis_meters == area.minor_axis_meters == 1000
        assert area.eccentricity == 0
        assert area.major_axis_bearing == 90
        assert area.wind_adjusted is True


class TestComputeWindAdjustedGeofence:
    """Tests for compute_wind_adjusted_geofence function."""

    def test_calm_has_no_ellipse(self, flight_risk_dog, rural_highway_context):
        result = compute_wind_adjusted_geofence(
            ORIGIN, flight_risk_dog, rural_highway_context, 10, [], WindData(speed=1, direction=0),
        )

        assert result.ellipse is None
        assert result.wind_bias is None
        assert result.geofence.radius_meters == 9800

    def test_windy_adds_ellipse_and_bias(self, flight_risk_dog, rural_highway_context):
        result = compute_wind_adjusted_geofence(
            ORIGIN, flight_risk_dog, rural_highway_context, 10, [], WindData(speed=20, direction=0),
        )

        assert result.ellipse.major_axis_meters == pytest.approx(9800 * 1.5)
        assert result.ellipse.center == result.geofence.center
        assert result.wind_bias.primary_direction == 180

    def test_downwind_reach_may_exceed_species_cap(self, flight_risk_dog, rural_highway_context):
        result = compute_wind_adjusted_geofence(
            ORIGIN, flight_risk_dog, rural_highway_context, 500, [], WindData(speed=20, direction=0),
        )

        assert result.geofence.radius_meters == 25000
        assert result.ellipse.major_axis_meters == pytest.approx(37500)
        assert result.ellipse.minor_axis_meters == pytest.approx(17500)


class TestHelpers:
    """Tests for overlap and channel preference helpers."""

    def test_geofences_overlap(self, flight_risk_dog, rural_highway_context):
        a = compute_dynamic_geofence(ORIGIN, flight_risk_dog, rural_highway_context, 10, [])
        b = compute_dynamic_geofence(Point(38.40, -81.63), flight_risk_dog, rural_highway_context, 10, [])

        assert geofences_overlap(a, b)

    def test_distant_geofences_do_not_overlap(self):
        pet = PetProfile(species=Species.CAT, behavior=BehaviorProfile.INDOOR_ONLY)
        context = LocationContext(environment=Environment.URBAN)
        a = compute_dynamic_geofence(ORIGIN, pet, context, 0, [])
        b = compute_dynamic_geofence(Point(39.0, -81.63), pet, context, 0, [])

        assert not geofences_overlap(a, b)

    @pytest.mark.parametrize("condition,expected", [
        (WeatherCondition.NORMAL, "standard"),
        (WeatherCondition.STORM, "responder"),
        (WeatherCondition.FLOOD, "emergency"),
    ])
    def test_weather_channel_preference(self, condition, expected):
        assert weather_channel_preference(condition) == expected
