"""
Secrets directory provider.

Resolves `${file:name}` to the trimmed contents of `<secrets_dir>/name`, which
fits Docker and Kubernetes secret mounts as well as local development.
"""

import logging
from pathlib import Path

from ...models import ConfigModel
from ..errors import SecretNotFoundError, SecretProviderError
from ..plugins import SecretProvider

logger = logging.getLogger(__name__)


class FileSecretProvider(SecretProvider):
    """Provider reading one secret per file from a base directory.

    Keys are relative file names. Absolute paths and keys that would leave
    the base directory are rejected.
    """

    def __init__(self, secrets_dir: str | Path | None = None):
        self.secrets_dir = Path(secrets_dir).resolve() if secrets_dir else None

    @property
    def name(self) -> str:
        return "File"

    def resolve(self, key: str) -> str:
        if self.secrets_dir is None:
            raise SecretProviderError("no secrets directory configured", key=key)

        key = key.strip()
        if not key:
            raise SecretNotFoundError("no file specified for file secret", key=key)

        file_path = self._secret_path(key)
        try:
            content = file_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise SecretNotFoundError(f"secret file {key!r} not found", key=key) from e
        except OSError as e:
            raise SecretProviderError(f"failed to read secret file {key!r}: {e}", key=key) from e

        logger.info(f"Retrieved secret from file {file_path}")
        return content.strip()

    def _secret_path(self, key: str) -> Path:
        assert self.secrets_dir is not None
        if Path(key).is_absolute():
            raise SecretProviderError("invalid secret key: absolute paths not allowed", key=key)
        file_path = (self.secrets_dir / key).resolve()
        if not file_path.is_relative_to(self.secrets_dir) or file_path == self.secrets_dir:
            raise SecretProviderError("invalid secret key: outside secrets directory", key=key)
        return file_path


class FileSecretConfig(ConfigModel):
    """Configuration for the secrets directory provider.

    ```yaml
    file_resolver:
      secrets_dir: /run/secrets
    ```
    """

    secrets_dir: str = ""

    def validate_config(self) -> None:
        if not self.secrets_dir:
            raise ValueError("secrets_dir is required for file resolver")
        path = Path(self.secrets_dir)
        if not path.exists():
            raise ValueError(f"secrets_dir {self.secrets_dir!r} does not exist")
        if not path.is_dir():
            raise ValueError(f"secrets_dir {self.secrets_dir!r} is not a directory")

    def create_client(self) -> FileSecretProvider:
        return FileSecretProvider(self.secrets_dir)
