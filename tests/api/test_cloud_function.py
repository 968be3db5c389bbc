"""Tests for the Cloud Function entry point."""

from unittest.mock import Mock, patch

import pytest

from petsearch.core.config import Config
from petsearch.main import escalate_case
from petsearch.orchestrator import Orchestrator
from petsearch.shell.counter_store import InMemoryAlertCounterStore


@pytest.fixture
def case_body():
    return {
        "location": {"lat": 38.35, "lng": -81.63},
        "pet": {"species": "cat", "behavior": "indoor_only"},
        "context": {"environment": "urban"},
        "hours_since_lost": 3,
        "wind": {"speed": 0, "direction": 0},
    }


def make_request(body):
    request = Mock()
    request.get_json.return_value = body
    return request


class TestEscalateCase:
    """Tests for escalate_case."""

    def test_success(self, case_body):
        orchestrator = Orchestrator(
            Config(),
            weather_client=Mock(),
            counter_store=InMemoryAlertCounterStore(),
            telemetry_reporter=Mock(),
        )

        with patch("petsearch.main._get_orchestrator", return_value=orchestrator):
            body, status = escalate_case(make_request(case_body))

        assert status == 200
        assert body["status"] == "success"
        assert body["geofence"]["radius_meters"] == 42
        assert body["tier"]["tier"] == "T0"
        assert body["eligible_channels"] == []

    def test_invalid_body_is_400(self):
        body, status = escalate_case(make_request(None))

        assert status == 400
        assert body["errors"][0]["field"] == "body"

    def test_collects_every_field_error(self, case_body):
        case_body["hours_since_lost"] = "soon"
        case_body["pet"]["species"] = "dragon"

        body, status = escalate_case(make_request(case_body))

        assert status == 400
        fields = {e["field"] for e in body["errors"]}
        assert fields == {"pet.species", "hours_since_lost"}

    def test_unexpected_error_is_500(self, case_body):
        orchestrator = Mock()
        orchestrator.evaluate.side_effect = RuntimeError("boom")

        with patch("petsearch.main._get_orchestrator", return_value=orchestrator):
            body, status = escalate_case(make_request(case_body))

        assert status == 500
        assert body == {"status": "error", "message": "boom"}
