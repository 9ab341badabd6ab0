"""
HashiCorp Vault provider.

Resolves `${vault:KEY}` by reading the secret stored at the configured Vault
path and returning its `KEY` field. Both KV engine versions are supported:

- KV v1: the response `data` is the key/value map itself
- KV v2: the map is nested one level down, under `data.data`
  (configure the path with the `data/` segment, e.g. `secret/data/myapp`)
"""

import logging
from typing import Any
from urllib.parse import urlparse

import hvac
from hvac.exceptions import InvalidPath

from ...models import ConfigModel
from ..errors import SecretNotFoundError, SecretProviderError
from ..plugins import SecretProvider

logger = logging.getLogger(__name__)


class VaultSecretProvider(SecretProvider):
    """Provider for secrets stored under a single Vault path."""

    def __init__(self, client: hvac.Client, path: str):
        self._client = client
        self.path = path

    @property
    def name(self) -> str:
        return "Vault"

    def resolve(self, key: str) -> str:
        data = self._read_secret_data(key)

        value = data.get(key)
        if not isinstance(value, str):
            raise SecretNotFoundError(
                f"secret {key!r} not found in Vault at path {self.path!r}", key=key
            )

        logger.info(f"Retrieved secret {key} from Vault path {self.path}")
        return value

    def cleanup(self) -> None:
        """Drop the client reference. hvac clients have no explicit close."""
        self._client = None

    def _read_secret_data(self, key: str) -> dict[str, Any]:
        if self._client is None:
            raise SecretProviderError("Vault client has been cleaned up", key=key)

        try:
            response = self._client.read(self.path)
        except InvalidPath:
            response = None
        except Exception as e:
            raise SecretProviderError(
                f"failed to read secret from Vault path {self.path!r}: {e}", key=key
            ) from e

        if not response or not response.get("data"):
            raise SecretNotFoundError(f"no secret found at Vault path {self.path!r}", key=key)

        data = response["data"]
        nested = data.get("data")
        if nested is None:
            # KV v1
            return data
        if not isinstance(nested, dict):
            raise SecretProviderError("unexpected data format in KV v2 secret", key=key)
        return nested


class VaultConfig(ConfigModel):
    """Configuration for connecting to HashiCorp Vault.

    ```yaml
    vault:
      address: https://vault.example.com:8200
      token: ${env:VAULT_TOKEN}
      path: secret/data/myapp
      namespace: team-a        # Vault Enterprise only
      timeout: 10
    ```
    """

    address: str = ""
    token: str = ""
    path: str = ""
    namespace: str = ""
    timeout: float = 30

    def validate_config(self) -> None:
        if not self.address:
            raise ValueError("Vault address is required")
        if not self.token:
            raise ValueError("Vault token is required")
        if not self.path:
            raise ValueError("Vault path is required")
        if self.timeout <= 0:
            raise ValueError("Vault timeout must be positive")

    def create_client(self) -> hvac.Client:
        parsed = urlparse(self.address)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"invalid Vault address {self.address!r}")

        return hvac.Client(
            url=self.address,
            token=self.token,
            namespace=self.namespace or None,
            timeout=self.timeout,
        )
