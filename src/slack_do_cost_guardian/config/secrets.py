"""Secret providers.

The DigitalOcean API key and the Slack signing secret live either in an AWS
Secrets Manager JSON secret, or are passed in with the invocation itself.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from slack_do_cost_guardian.errors import SecretLookupError


class SecretProvider(ABC):
    """Look up secrets by name."""

    @abstractmethod
    def get_secret(self, name: str) -> str | None:
        """Return the secret value, or None if it isn't set."""
        pass


class StaticSecretProvider(SecretProvider):
    """Secrets supplied up front, e.g. the `__secrets` field of an invocation."""

    def __init__(self, secrets: Mapping[str, Any] | None = None):
        self._secrets = dict(secrets or {})

    def get_secret(self, name: str) -> str | None:
        value = self._secrets.get(name)
        return str(value) if value else None


class SecretsManagerProvider(SecretProvider):
    """
    Read keys from one JSON secret in AWS Secrets Manager.

    The secret is fetched once and cached for the life of the provider.
    """

    def __init__(
        self,
        secret_name: str,
        region: str = "us-east-1",
        secrets_client: boto3.client | None = None,
    ):
        """
        Initialize the provider.

        Args:
            secret_name: Name or ARN of the secret.
            region: AWS region for Secrets Manager.
            secrets_client: Optional boto3 Secrets Manager client.
        """
        self.secret_name = secret_name
        self.region = region
        self._secrets_client = secrets_client
        self._secret_data: dict[str, Any] | None = None

    @property
    def secrets_client(self) -> boto3.client:
        """Get or create Secrets Manager client."""
        if self._secrets_client is None:
            self._secrets_client = boto3.client("secretsmanager", region_name=self.region)
        return self._secrets_client

    def get_secret(self, name: str) -> str | None:
        if self._secret_data is None:
            self._secret_data = self._load()
        value = self._secret_data.get(name)
        return str(value) if value else None

    def _load(self) -> dict[str, Any]:
        """
        Fetch and decode the secret.

        A secret that doesn't exist is treated as empty so that callers can
        report which key is missing.

        Raises:
            SecretLookupError: If the secret can't be read or isn't a JSON object.
        """
        try:
            response = self.secrets_client.get_secret_value(SecretId=self.secret_name)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ResourceNotFoundException":
                print(f"Secret '{self.secret_name}' not found")
                return {}
            raise SecretLookupError(f"Error retrieving secret '{self.secret_name}': {e}") from e
        except BotoCoreError as e:
            raise SecretLookupError(f"Error retrieving secret '{self.secret_name}': {e}") from e

        if "SecretString" not in response:
            raise SecretLookupError(
                f"Secret '{self.secret_name}' does not contain a string value"
            )

        try:
            data = json.loads(response["SecretString"])
        except json.JSONDecodeError as e:
            raise SecretLookupError(f"Secret '{self.secret_name}' is not valid JSON") from e

        if not isinstance(data, dict):
            raise SecretLookupError(f"Secret '{self.secret_name}' is not a JSON object")

        return data
