"""
Registration of secret providers configured in the document itself.

A service typically calls `register_secret_providers()` right after loading
its document, before asking for any other section:

```yaml
vault:
  address: https://vault.example.com:8200
  token: ${env:VAULT_TOKEN}
  path: secret/data/myapp
file_resolver:
  secrets_dir: /run/secrets
aws:
  region: eu-west-1
  secret_name: myapp/production
```

Provider sections may themselves use placeholders of providers registered
earlier (the environment provider is always available).
"""

import logging

from .document import Document
from .loader import get_client_and_config
from .registry import SecretProviderRegistry, get_global_registry
from .secrets.aws import AWSConfig, AWSSecretsManagerProvider
from .secrets.file import FileSecretConfig
from .secrets.vault import VaultConfig, VaultSecretProvider

logger = logging.getLogger(__name__)


def register_secret_providers(
    document: Document, registry: SecretProviderRegistry | None = None
) -> list[str]:
    """Register the `vault`, `file` and `aws` providers configured in `document`.

    Absent sections are skipped. The first failing section aborts the
    bootstrap with its error; providers registered before it stay registered.

    Returns:
        The schemes that were registered, in registration order
    """
    if registry is None:
        registry = get_global_registry()
    registered: list[str] = []

    vault_client, vault_config = get_client_and_config(document, "vault", VaultConfig, registry=registry)
    if vault_config is not None:
        registry.register("vault", VaultSecretProvider(vault_client, vault_config.path))
        registered.append("vault")

    file_provider, _ = get_client_and_config(document, "file_resolver", FileSecretConfig, registry=registry)
    if file_provider is not None:
        registry.register("file", file_provider)
        registered.append("file")

    aws_client, aws_config = get_client_and_config(document, "aws", AWSConfig, registry=registry)
    if aws_config is not None:
        registry.register("aws", AWSSecretsManagerProvider(aws_client, aws_config.secret_name))
        registered.append("aws")

    if registered:
        logger.info(f"Registered secret providers from configuration: {registered}")
    return registered
