"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
import tempfile
from unittest.mock import Mock, patch

from petsearch.core.config import Config
from petsearch.shell.config_loader import (
    _get_secret_manager_client,
    _parse_counters,
    _parse_telemetry,
    _parse_weather,
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)


NO_SECRETS = 'petsearch.shell.config_loader._get_secret_manager_client'


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        """Non-string values are returned unchanged."""
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("plain-key") == "plain-key"

    def test_resolves_env_var_placeholder(self):
        """Resolves ${VAR} placeholders from environment."""
        with patch.dict(os.environ, {"TELEMETRY_URL": "https://t.example.org"}):
            assert _resolve_value("${TELEMETRY_URL}") == "https://t.example.org"

    def test_returns_placeholder_if_env_var_not_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"

    def test_uses_secret_client_when_provided(self):
        mock_client = Mock()
        mock_client.resolve.return_value = "owm-secret"

        result = _resolve_value("${secret:weather-api-key}", mock_client)

        mock_client.resolve.assert_called_once_with("${secret:weather-api-key}")
        assert result == "owm-secret"

    def test_ignores_secret_placeholder_without_client(self):
        result = _resolve_value("${secret:weather-api-key}", None)
        assert result == "${secret:weather-api-key}"


class TestParseSections:
    """Tests for the section parsers."""

    def test_weather_defaults(self):
        result = _parse_weather({})

        assert result.provider == "openweathermap"
        assert result.api_key is None
        assert result.timeout_seconds == 5.0
        assert result.enabled is True

    def test_weather_values(self):
        result = _parse_weather({
            "provider": "weatherapi",
            "api_key": "abc",
            "timeout_seconds": "2.5",
            "enabled": False,
        })

        assert result.provider == "weatherapi"
        assert result.api_key == "abc"
        assert result.timeout_seconds == 2.5
        assert result.enabled is False

    def test_weather_key_resolved_from_secret(self):
        mock_client = Mock()
        mock_client.resolve.return_value = "resolved-key"

        result = _parse_weather({"api_key": "${secret:weather-api-key}"}, mock_client)

        assert result.api_key == "resolved-key"

    def test_telemetry_enabled(self):
        result = _parse_telemetry({
            "endpoint_url": "https://t.example.org/reports",
            "max_attempts": 5,
            "max_pending": 20,
            "system_name": "county-pilot",
        })

        assert result.enabled is True
        assert result.max_attempts == 5
        assert result.max_pending == 20
        assert result.system_name == "county-pilot"

    def test_telemetry_disabled_clears_endpoint(self):
        result = _parse_telemetry({
            "enabled": False,
            "endpoint_url": "https://t.example.org/reports",
        })

        assert result.endpoint_url is None
        assert result.enabled is False

    def test_counters(self):
        result = _parse_counters({"backend": "firestore", "firestore_database": "pets"})

        assert result.backend == "firestore"
        assert result.firestore_database == "pets"
        assert result.firestore_collection == "channel_alert_counts"


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_loads_minimal_config(self):
        with patch(NO_SECRETS, return_value=None):
            result = load_config_from_dict({})

        assert result == Config()

    def test_loads_full_config(self):
        data = {
            "weather": {"provider": "openweathermap", "api_key": "abc"},
            "telemetry": {"endpoint_url": "https://t.example.org/reports"},
            "counters": {"backend": "firestore"},
            "default_coverage_area": "WV-GRE",
        }

        with patch(NO_SECRETS, return_value=None):
            result = load_config_from_dict(data)

        assert result.weather.api_key == "abc"
        assert result.telemetry.enabled is True
        assert result.counters.backend == "firestore"
        assert result.default_coverage_area == "WV-GRE"

    def test_null_sections_use_defaults(self):
        with patch(NO_SECRETS, return_value=None):
            result = load_config_from_dict({"weather": None, "telemetry": None})

        assert result.weather.provider == "openweathermap"
        assert result.telemetry.enabled is False


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_from_yaml_file(self):
        """Loads configuration from YAML file."""
        yaml_content = """
weather:
  provider: weatherapi
  api_key: plain-key
counters:
  backend: memory
default_coverage_area: WV-KAN
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(yaml_content)
            temp_path = f.name

        try:
            with patch(NO_SECRETS, return_value=None):
                result = load_config(temp_path)

            assert result.weather.provider == "weatherapi"
            assert result.weather.api_key == "plain-key"
            assert result.default_coverage_area == "WV-KAN"
        finally:
            os.unlink(temp_path)

    def test_returns_default_config_when_file_not_found(self):
        with patch(NO_SECRETS, return_value=None):
            result = load_config("/nonexistent/path/config.yaml")

        assert result == Config()

    def test_returns_default_config_for_empty_file(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("")
            temp_path = f.name

        try:
            with patch(NO_SECRETS, return_value=None):
                result = load_config(temp_path)

            assert result == Config()
        finally:
            os.unlink(temp_path)

    def test_uses_config_path_env_var(self):
        """Uses CONFIG_PATH environment variable when path not specified."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("default_coverage_area: WV-GRE\n")
            temp_path = f.name

        try:
            with patch.dict(os.environ, {"CONFIG_PATH": temp_path}):
                with patch(NO_SECRETS, return_value=None):
                    result = load_config()

            assert result.default_coverage_area == "WV-GRE"
        finally:
            os.unlink(temp_path)


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_defaults_without_env(self):
        with patch.dict(os.environ, {}, clear=True):
            with patch(NO_SECRETS, return_value=None):
                result = load_config_from_env()

        assert result.weather.api_key is None
        assert result.telemetry.enabled is False
        assert result.counters.backend == "memory"

    def test_loads_config_from_env_vars(self):
        env_vars = {
            "WEATHER_API_KEY": "env-key",
            "WEATHER_PROVIDER": "weatherapi",
            "WEATHER_TIMEOUT_SECONDS": "3",
            "TELEMETRY_URL": "https://t.example.org/reports",
            "COUNTER_STORE": "firestore",
            "FIRESTORE_DATABASE": "custom-database",
            "DEFAULT_COVERAGE_AREA": "WV-GRE",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            with patch(NO_SECRETS, return_value=None):
                result = load_config_from_env()

        assert result.weather.api_key == "env-key"
        assert result.weather.provider == "weatherapi"
        assert result.weather.timeout_seconds == 3.0
        assert result.telemetry.endpoint_url == "https://t.example.org/reports"
        assert result.counters.backend == "firestore"
        assert result.counters.firestore_database == "custom-database"
        assert result.default_coverage_area == "WV-GRE"

    def test_uses_secret_manager_when_available(self):
        mock_client = Mock()
        mock_client.get_secret.return_value = "secret-key"

        with patch.dict(os.environ, {"WEATHER_API_KEY_SECRET": "owm-key"}, clear=True):
            with patch(NO_SECRETS, return_value=mock_client):
                result = load_config_from_env()

        mock_client.get_secret.assert_called_once_with("owm-key")
        assert result.weather.api_key == "secret-key"

    def test_falls_back_to_env_var_when_secret_not_found(self):
        mock_client = Mock()
        mock_client.get_secret.return_value = None

        with patch.dict(os.environ, {"WEATHER_API_KEY": "env-key"}, clear=True):
            with patch(NO_SECRETS, return_value=mock_client):
                result = load_config_from_env()

        assert result.weather.api_key == "env-key"


class TestGetSecretManagerClient:
    """Tests for _get_secret_manager_client function."""

    def test_returns_none_without_project(self):
        with patch.dict(os.environ, {}, clear=True):
            with patch('subprocess.run', side_effect=FileNotFoundError()):
                result = _get_secret_manager_client()

        assert result is None

    def test_creates_client_with_project(self):
        with patch.dict(os.environ, {"GCP_PROJECT": "test-project"}):
            with patch('petsearch.shell.config_loader.SecretManagerClient') as MockClient:
                result = _get_secret_manager_client()

        assert MockClient.call_args[0][0].project_id == "test-project"
        assert result is MockClient.return_value

    def test_uses_gcloud_config_project(self):
        mock_result = Mock()
        mock_result.returncode = 0
        mock_result.stdout = "gcloud-project\n"

        with patch.dict(os.environ, {}, clear=True):
            with patch('subprocess.run', return_value=mock_result):
                with patch('petsearch.shell.config_loader.SecretManagerClient') as MockClient:
                    _get_secret_manager_client()

        assert MockClient.call_args[0][0].project_id == "gcloud-project"
