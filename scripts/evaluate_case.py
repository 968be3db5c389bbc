#!/usr/bin/env python3
"""Evaluate a lost-pet case file and print the escalation decision.

Runs the full pipeline locally: weather, geofence, tier and channel
eligibility. Nothing is dispatched and no telemetry is sent unless
--telemetry is given.

Usage:
    # Evaluate with live weather (needs a weather API key in config)
    python scripts/evaluate_case.py case.json

    # Offline, with a fixed wind reading
    python scripts/evaluate_case.py case.json --offline --wind 12 270

    # Only the summary line
    python scripts/evaluate_case.py case.json --offline --summary

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    GCP_PROJECT: GCP project ID for Secret Manager access
"""

import argparse
import dataclasses
import json
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from petsearch.api_handler import decision_to_dict, parse_escalation_request
from petsearch.core.case import InputValidationError
from petsearch.core.config import TelemetryConfig
from petsearch.core.weather import WindData
from petsearch.orchestrator import Orchestrator
from petsearch.shell.config_loader import load_config

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Evaluate a lost-pet case file")
    parser.add_argument("case_file", help="Path to a JSON case file")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not fetch weather",
    )
    parser.add_argument(
        "--wind",
        nargs=2,
        type=float,
        metavar=("SPEED_MPH", "FROM_DEGREES"),
        help="Use this wind instead of fetching weather",
    )
    parser.add_argument(
        "--telemetry",
        action="store_true",
        help="Send the telemetry report configured in the config file",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print only the one-line summary",
    )
    args = parser.parse_args()

    with open(args.case_file) as f:
        body = json.load(f)

    try:
        request = parse_escalation_request(body)
    except InputValidationError as e:
        for error in e.errors:
            logger.error("%s: %s", error.field, error.message)
        return 2

    if args.wind:
        request = dataclasses.replace(
            request,
            wind=WindData(speed=args.wind[0], direction=args.wind[1] % 360),
        )

    config = load_config()
    if args.offline:
        config.weather.enabled = False
    if not args.telemetry:
        config.telemetry = TelemetryConfig()

    orchestrator = Orchestrator(config)
    try:
        decision = orchestrator.evaluate(request)
    finally:
        orchestrator.telemetry_reporter.shutdown()

    if args.summary:
        print(decision.summary)
    else:
        print(json.dumps(decision_to_dict(decision), indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
