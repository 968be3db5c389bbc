"""Cloud Function Entry Point.

This module provides the entry point for Google Cloud Functions.
It's a thin wrapper that loads configuration, parses the request and
invokes the orchestrator.
"""

import json
import logging
import os
from typing import Any

import functions_framework
from flask import Request

from petsearch.api_handler import decision_to_dict, errors_to_dict, parse_escalation_request
from petsearch.core.case import InputValidationError
from petsearch.core.config import Config, validate_config
from petsearch.orchestrator import Orchestrator
from petsearch.shell.config_loader import load_config, load_config_from_env


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

_orchestrator: Orchestrator | None = None


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.environ.get("WEATHER_API_KEY") or os.environ.get("WEATHER_API_KEY_SECRET"):
        # Simple env-based config
        return load_config_from_env()
    else:
        # Try default config path
        return load_config()


def _get_orchestrator() -> Orchestrator:
    """Build the orchestrator once per instance.

    Counters and the telemetry thread pool live as long as the instance.
    """
    global _orchestrator
    if _orchestrator is None:
        config = _get_config()
        result = validate_config(config)
        for error in result.errors:
            if error.severity == "warning":
                logger.warning("Config %s: %s", error.field, error.message)
            else:
                logger.error("Config %s: %s", error.field, error.message)
        _orchestrator = Orchestrator(config)
    return _orchestrator


@functions_framework.http
def escalate_case(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP Cloud Function entry point.

    Evaluates one lost-pet case and returns the geofence, tier and
    channel eligibility.

    Args:
        request: Flask request with a JSON case body

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    try:
        body = request.get_json(silent=True)
        escalation = parse_escalation_request(body)
    except InputValidationError as e:
        logger.warning("Rejected case input: %s", str(e))
        return errors_to_dict(e), 400

    try:
        decision = _get_orchestrator().evaluate(escalation)
        return {"status": "success", **decision_to_dict(decision)}, 200

    except Exception as e:
        logger.exception("Unexpected error evaluating case %s", escalation.case_id)
        return {
            "status": "error",
            "message": str(e),
        }, 500


# For local testing
if __name__ == "__main__":
    import sys

    if len(sys.argv) != 2:
        print("Usage: python -m petsearch.main <case.json>")
        sys.exit(1)

    class LocalRequest:
        def __init__(self, path: str) -> None:
            with open(path) as f:
                self._body = json.load(f)

        def get_json(self, silent: bool = False) -> Any:
            return self._body

    response, status = escalate_case(LocalRequest(sys.argv[1]))
    print(f"\nResponse ({status}):")
    print(json.dumps(response, indent=2))
