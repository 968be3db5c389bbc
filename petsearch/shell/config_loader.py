"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, WeatherConfig, ...) are defined in petsearch/core/config.py.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Any

import yaml

from petsearch.core.config import Config, CounterStoreConfig, TelemetryConfig, WeatherConfig
from petsearch.shell.secret_manager_client import (
    SecretManagerClient,
    SecretManagerConfig,
    parse_placeholder,
)


logger = logging.getLogger(__name__)


def _get_secret_manager_client() -> SecretManagerClient | None:
    """Get or create a Secret Manager client.

    Returns None if no GCP project can be found (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if not project_id:
        try:
            result = subprocess.run(
                ["gcloud", "config", "get-value", "project"],
                capture_output=True,
                text=True,
                timeout=2,
            )
            if result.returncode == 0 and result.stdout.strip():
                project_id = result.stdout.strip()
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("gcloud project lookup unavailable: %s", str(e))

    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: SecretManagerClient | None = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    var_name = parse_placeholder(value)
    if var_name is not None and not var_name.startswith("secret:"):
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _parse_weather(
    data: dict[str, Any],
    secret_client: SecretManagerClient | None = None,
) -> WeatherConfig:
    """Parse the weather section."""
    api_key = data.get("api_key")
    if api_key is not None:
        api_key = _resolve_value(api_key, secret_client)

    return WeatherConfig(
        provider=data.get("provider", "openweathermap"),
        api_key=api_key,
        timeout_seconds=float(data.get("timeout_seconds", 5.0)),
        enabled=bool(data.get("enabled", True)),
    )


def _parse_telemetry(
    data: dict[str, Any],
    secret_client: SecretManagerClient | None = None,
) -> TelemetryConfig:
    """Parse the telemetry section.

    Setting enabled: false clears the endpoint.
    """
    endpoint_url = data.get("endpoint_url")
    if endpoint_url is not None:
        endpoint_url = _resolve_value(endpoint_url, secret_client)
    if not data.get("enabled", True):
        endpoint_url = None

    return TelemetryConfig(
        endpoint_url=endpoint_url,
        timeout_seconds=float(data.get("timeout_seconds", 5.0)),
        max_attempts=int(data.get("max_attempts", 3)),
        max_pending=int(data.get("max_pending", 100)),
        system_name=data.get("system_name", "petsearch"),
    )


def _parse_counters(data: dict[str, Any]) -> CounterStoreConfig:
    """Parse the counters section."""
    return CounterStoreConfig(
        backend=data.get("backend", "memory"),
        firestore_database=data.get("firestore_database"),
        firestore_collection=data.get("firestore_collection", "channel_alert_counts"),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()

    return Config(
        weather=_parse_weather(data.get("weather") or {}, secret_client),
        telemetry=_parse_telemetry(data.get("telemetry") or {}, secret_client),
        counters=_parse_counters(data.get("counters") or {}),
        default_coverage_area=data.get("default_coverage_area"),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: weather=%s, telemetry=%s, counters=%s",
        config.weather.provider,
        "on" if config.telemetry.enabled else "off",
        config.counters.backend,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        WEATHER_PROVIDER: 'openweathermap' (default) or 'weatherapi'
        WEATHER_API_KEY: Provider API key
        WEATHER_API_KEY_SECRET: Secret name in Secret Manager (alternative to WEATHER_API_KEY)
        WEATHER_TIMEOUT_SECONDS: Fetch timeout
        TELEMETRY_URL: Aggregation endpoint (unset disables telemetry)
        COUNTER_STORE: 'memory' (default) or 'firestore'
        FIRESTORE_DATABASE: Firestore database name
        DEFAULT_COVERAGE_AREA: County code used for partner matching

    Returns:
        Config object from environment
    """
    secret_client = _get_secret_manager_client()
    api_key = None

    secret_name = os.environ.get("WEATHER_API_KEY_SECRET", "weather-api-key")
    if secret_client:
        api_key = secret_client.get_secret(secret_name)
        if api_key:
            logger.info("Using weather API key from Secret Manager")

    if not api_key:
        api_key = os.environ.get("WEATHER_API_KEY")

    if not api_key:
        logger.warning("WEATHER_API_KEY not set and no secret found; wind data disabled")

    weather = WeatherConfig(
        provider=os.environ.get("WEATHER_PROVIDER", "openweathermap"),
        api_key=api_key,
        timeout_seconds=float(os.environ.get("WEATHER_TIMEOUT_SECONDS", "5")),
    )

    telemetry = TelemetryConfig(endpoint_url=os.environ.get("TELEMETRY_URL") or None)

    counters = CounterStoreConfig(
        backend=os.environ.get("COUNTER_STORE", "memory"),
        firestore_database=os.environ.get("FIRESTORE_DATABASE"),
    )

    return Config(
        weather=weather,
        telemetry=telemetry,
        counters=counters,
        default_coverage_area=os.environ.get("DEFAULT_COVERAGE_AREA"),
    )
