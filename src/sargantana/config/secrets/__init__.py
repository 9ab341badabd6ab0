"""
Built-in secret providers.

Each module pairs a provider with the configuration shape that builds it:

- `env`: `EnvSecretProvider` (no configuration)
- `file`: `FileSecretProvider` / `FileSecretConfig`
- `vault`: `VaultSecretProvider` / `VaultConfig`
- `aws`: `AWSSecretsManagerProvider` / `AWSConfig`
"""

from .aws import AWSConfig, AWSSecretsManagerProvider
from .env import EnvSecretProvider
from .file import FileSecretConfig, FileSecretProvider
from .vault import VaultConfig, VaultSecretProvider

__all__ = [
    "AWSConfig",
    "AWSSecretsManagerProvider",
    "EnvSecretProvider",
    "FileSecretConfig",
    "FileSecretProvider",
    "VaultConfig",
    "VaultSecretProvider",
]
