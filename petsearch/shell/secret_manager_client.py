"""Secret Manager Client - Imperative Shell.

This module reads secrets (weather API keys, telemetry endpoints) from
Google Cloud Secret Manager and resolves config placeholders.
"""

import logging
import os
from dataclasses import dataclass

from google.cloud import secretmanager


logger = logging.getLogger(__name__)


SECRET_PREFIX = "secret:"


@dataclass
class SecretManagerConfig:
    """Configuration for Secret Manager client.

    Attributes:
        project_id: GCP project ID (None for default)
    """
    project_id: str | None = None


def parse_placeholder(value: str) -> str | None:
    """Extract the body of a ${...} placeholder.

    Pure function.

    Returns:
        Placeholder body, or None if value is not a placeholder
    """
    if value.startswith("${") and value.endswith("}"):
        return value[2:-1]
    return None


class SecretManagerClient:
    """Client for reading secrets from Google Cloud Secret Manager.

    This is part of the imperative shell - it handles secret I/O.
    """

    def __init__(self, config: SecretManagerConfig | None = None) -> None:
        self.config = config or SecretManagerConfig()
        self._client: secretmanager.SecretManagerServiceClient | None = None

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy initialization of Secret Manager client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def get_secret(self, secret_name: str, version: str = "latest") -> str | None:
        """Fetch a secret value from Secret Manager.

        This method performs I/O.

        Args:
            secret_name: Name of the secret (not the full resource path)
            version: Version of the secret (default: "latest")

        Returns:
            Secret value as string, or None if not found
        """
        if not self.config.project_id:
            logger.error("No project ID configured for Secret Manager")
            return None

        name = f"projects/{self.config.project_id}/secrets/{secret_name}/versions/{version}"

        try:
            logger.info("Fetching secret: %s", secret_name)
            response = self.client.access_secret_version(request={"name": name})
            return response.payload.data.decode("UTF-8")

        except Exception as e:
            logger.error("Failed to fetch secret %s: %s", secret_name, str(e))
            return None

    def resolve(self, value: str) -> str:
        """Resolve a ${secret:name} or ${ENV_VAR} placeholder.

        Unresolvable placeholders are returned unchanged (and logged) so
        config validation can flag them.

        Args:
            value: Config value, possibly a placeholder

        Returns:
            Resolved value
        """
        placeholder = parse_placeholder(value)
        if placeholder is None:
            return value

        if placeholder.startswith(SECRET_PREFIX):
            secret_value = self.get_secret(placeholder[len(SECRET_PREFIX):])
            if secret_value:
                return secret_value
            logger.warning("Secret %s could not be resolved", placeholder[len(SECRET_PREFIX):])
            return value

        env_value = os.environ.get(placeholder)
        if env_value:
            return env_value

        logger.warning("Environment variable %s not set", placeholder)
        return value
