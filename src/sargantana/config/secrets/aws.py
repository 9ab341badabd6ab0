"""
AWS Secrets Manager provider.

Resolves `${aws:KEY}` by fetching one named secret and returning its `KEY`
field. Secrets are expected to hold a JSON object; a secret whose string is
not JSON is returned as a whole regardless of the key.
"""

import json
import logging
from typing import Any

import boto3
from botocore.config import Config as BotocoreConfig
from botocore.exceptions import BotoCoreError, ClientError

from ...models import ConfigModel
from ..errors import SecretNotFoundError, SecretProviderError
from ..plugins import SecretProvider

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"ResourceNotFoundException"}


class AWSSecretsManagerProvider(SecretProvider):
    """Provider for fields of a single AWS Secrets Manager secret."""

    def __init__(self, client: Any, secret_name: str):
        self._client = client
        self.secret_name = secret_name

    @property
    def name(self) -> str:
        return "AWS Secrets Manager"

    def resolve(self, key: str) -> str:
        secret_string = self._fetch_secret_string(key)

        try:
            secret_data = json.loads(secret_string)
        except json.JSONDecodeError:
            logger.debug(f"Retrieved plain text secret {self.secret_name} from AWS Secrets Manager")
            return secret_string

        if not isinstance(secret_data, dict):
            return secret_string

        value = secret_data.get(key)
        if not isinstance(value, str):
            raise SecretNotFoundError(
                f"key {key!r} not found in AWS secret {self.secret_name!r}", key=key
            )

        logger.info(f"Retrieved secret {key} from AWS secret {self.secret_name}")
        return value

    def cleanup(self) -> None:
        self._client = None

    def _fetch_secret_string(self, key: str) -> str:
        if self._client is None:
            raise SecretProviderError("AWS client has been cleaned up", key=key)

        try:
            result = self._client.get_secret_value(SecretId=self.secret_name)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in _NOT_FOUND_CODES:
                raise SecretNotFoundError(
                    f"AWS secret {self.secret_name!r} not found", key=key
                ) from e
            raise SecretProviderError(
                f"failed to read secret from AWS Secrets Manager: {self.secret_name!r}: {e}",
                key=key,
            ) from e
        except BotoCoreError as e:
            raise SecretProviderError(
                f"failed to read secret from AWS Secrets Manager: {self.secret_name!r}: {e}",
                key=key,
            ) from e

        secret_string = result.get("SecretString")
        if secret_string is None:
            raise SecretNotFoundError(
                f"secret {self.secret_name!r} has no string value", key=key
            )
        return secret_string


class AWSConfig(ConfigModel):
    """Configuration for AWS Secrets Manager.

    Credentials are optional; without them boto3's default credential chain
    is used. `endpoint` points the client at LocalStack or another
    compatible service.

    ```yaml
    aws:
      region: eu-west-1
      secret_name: myapp/production
      access_key_id: ${env:AWS_ACCESS_KEY_ID}
      secret_access_key: ${env:AWS_SECRET_ACCESS_KEY}
    ```
    """

    region: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    secret_name: str = ""
    endpoint: str = ""
    connect_timeout: float = 10
    read_timeout: float = 30

    def validate_config(self) -> None:
        if not self.region:
            raise ValueError("AWS region is required")
        if not self.secret_name:
            raise ValueError("AWS secret name is required")
        if bool(self.access_key_id) != bool(self.secret_access_key):
            raise ValueError("access_key_id and secret_access_key must be set together")
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise ValueError("AWS timeouts must be positive")

    def create_client(self) -> Any:
        session = boto3.Session(
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            region_name=self.region,
        )
        return session.client(
            "secretsmanager",
            endpoint_url=self.endpoint or None,
            config=BotocoreConfig(
                connect_timeout=self.connect_timeout,
                read_timeout=self.read_timeout,
            ),
        )
