"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Weather provider client (HTTP)
- Telemetry reporting (HTTP, background threads)
- Alert counter store (in-memory or Firestore)
- Configuration loading (environment/files/Secret Manager)

Keep this layer thin and simple. All business logic should be in core.
"""

from petsearch.shell.config_loader import load_config, load_config_from_env
from petsearch.shell.counter_store import (
    AlertCounterStore,
    FirestoreAlertCounterStore,
    InMemoryAlertCounterStore,
    create_counter_store,
)
from petsearch.shell.telemetry_client import TelemetryClient, TelemetryReporter
from petsearch.shell.weather_client import WeatherClient

__all__ = [
    "AlertCounterStore",
    "FirestoreAlertCounterStore",
    "InMemoryAlertCounterStore",
    "TelemetryClient",
    "TelemetryReporter",
    "WeatherClient",
    "create_counter_store",
    "load_config",
    "load_config_from_env",
]
