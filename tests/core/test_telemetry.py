"""Tests for telemetry report formatting."""

from datetime import datetime, timezone

import pytest

from petsearch.core.geo import Point
from petsearch.core.telemetry import (
    REPORT_TYPE,
    compute_search_outcome,
    format_telemetry_report,
    format_wind_summary,
)
from petsearch.core.weather import WindData


REPORTED_AT = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestComputeSearchOutcome:
    """Tests for compute_search_outcome function."""

    def test_not_found(self):
        outcome = compute_search_outcome(Point(0.0, 0.0), None)

        assert outcome.found is False
        assert outcome.distance_from_last_known == 0

    def test_found_south(self):
        outcome = compute_search_outcome(Point(1.0, 0.0), Point(0.99, 0.0))

        assert outcome.found is True
        assert outcome.distance_from_last_known == pytest.approx(1112, rel=0.01)
        assert outcome.direction_from_last_known == pytest.approx(180, abs=0.01)


class TestFormatTelemetryReport:
    """Tests for format_telemetry_report function."""

    def test_minimal_report(self):
        payload = format_telemetry_report("case-1", None, REPORTED_AT)

        assert payload == {
            "system": "petsearch",
            "type": REPORT_TYPE,
            "case_id": "case-1",
            "weather": {"wind": None, "conditions": None},
            "timestamp": "2024-06-01T12:00:00+00:00",
        }

    def test_includes_wind_and_outcome(self):
        outcome = compute_search_outcome(Point(1.0, 0.0), Point(0.99, 0.0))

        payload = format_telemetry_report(
            "case-2",
            None,
            REPORTED_AT,
            system_name="county-pilot",
            outcome=outcome,
            wind=WindData(speed=12, direction=270),
        )

        assert payload["system"] == "county-pilot"
        assert payload["weather"]["wind"] == {"speed": 12, "direction": 270, "gust_speed": None}
        assert payload["outcome"]["found"] is True
        assert payload["outcome"]["direction_from_last_known"] == 180.0

    def test_wind_summary_none(self):
        assert format_wind_summary(None) is None
