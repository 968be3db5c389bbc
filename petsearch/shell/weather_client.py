"""Weather API Client - Imperative Shell.

This module handles HTTP communication with weather providers.
All I/O is contained here; normalization and assessment are in the
core module.

Any failure (missing key, timeout, HTTP error, unusable payload) is
logged and returned as None so the pipeline carries on without wind.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import requests

from petsearch.core.config import WeatherConfig
from petsearch.core.geo import Point
from petsearch.core.weather import WeatherSnapshot, WeatherUnavailable, parse_weather


logger = logging.getLogger(__name__)


OPENWEATHERMAP_URL = "https://api.openweathermap.org/data/2.5/weather"
WEATHERAPI_URL = "https://api.weatherapi.com/v1/current.json"


class WeatherClient:
    """Client for fetching current weather at a location.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(self, config: WeatherConfig | None = None) -> None:
        """Initialize weather client.

        Args:
            config: Weather provider configuration
        """
        self.config = config or WeatherConfig()

    def _build_request(self, location: Point) -> tuple[str, dict[str, str]]:
        """Build URL and query parameters for the configured provider."""
        if self.config.provider == "weatherapi":
            return WEATHERAPI_URL, {
                "key": self.config.api_key or "",
                "q": f"{location.lat},{location.lng}",
            }

        return OPENWEATHERMAP_URL, {
            "lat": str(location.lat),
            "lon": str(location.lng),
            "appid": self.config.api_key or "",
            "units": "imperial",
        }

    def fetch_raw(self, location: Point) -> dict[str, Any]:
        """Fetch the raw provider payload.

        This method performs HTTP I/O.

        Args:
            location: Where to fetch weather for

        Returns:
            Raw JSON payload

        Raises:
            WeatherUnavailable: If no API key is configured
            requests.RequestException: If the request fails
        """
        if not self.config.api_key:
            raise WeatherUnavailable("Weather API key not configured")

        url, params = self._build_request(location)

        logger.info(
            "Fetching weather from %s for (%.4f, %.4f)",
            self.config.provider,
            location.lat,
            location.lng,
        )

        response = requests.get(
            url,
            params=params,
            timeout=self.config.timeout_seconds,
        )
        response.raise_for_status()

        return response.json()

    def snapshot_from_payload(
        self,
        location: Point,
        payload: dict[str, Any],
    ) -> WeatherSnapshot | None:
        """Normalize a pre-fetched payload from the configured provider.

        Returns:
            WeatherSnapshot, or None if the payload is unusable
        """
        try:
            return parse_weather(
                self.config.provider,
                payload,
                location,
                datetime.now(timezone.utc),
            )
        except WeatherUnavailable as e:
            logger.warning("Weather payload unusable: %s", str(e))
            return None

    def fetch_snapshot(self, location: Point) -> WeatherSnapshot | None:
        """Fetch and normalize current weather.

        Never raises; the caller treats None as calm weather.

        Args:
            location: Where to fetch weather for

        Returns:
            WeatherSnapshot, or None if weather is unavailable
        """
        if not self.config.enabled:
            return None

        try:
            payload = self.fetch_raw(location)
        except WeatherUnavailable as e:
            logger.warning("Weather unavailable: %s", str(e))
            return None
        except requests.Timeout:
            logger.error(
                "Weather request timed out after %.1fs",
                self.config.timeout_seconds,
            )
            return None
        except requests.RequestException as e:
            logger.error("Weather request failed: %s", str(e))
            return None
        except ValueError as e:
            logger.error("Weather response was not JSON: %s", str(e))
            return None

        snapshot = self.snapshot_from_payload(location, payload)
        if snapshot is not None:
            logger.info(
                "Weather at (%.4f, %.4f): wind %.1f mph from %.0f, %s",
                location.lat,
                location.lng,
                snapshot.wind.speed,
                snapshot.wind.direction,
                snapshot.conditions.value,
            )

        return snapshot
