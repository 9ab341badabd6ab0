"""
Typed configuration loading with pluggable secret resolution.

The sargantana.config module turns one configuration document into typed,
validated, secret-free records on demand. Services keep the document around
and ask for the sections they need, each time getting a fresh instance.

## Architecture Overview

Loading happens in two stages:

1. **Document loading**: The file is parsed once and split into sections,
   each kept as raw bytes in the document's format
2. **Section materialization**: `get()` decodes one section into a shape,
   resolves its `${scheme:key}` placeholders and validates it

Nothing is decided about a section until a caller picks its shape, and no
resolved value is ever cached.

## Key Components

### Document
The loaded file. See `load_document()` and `Document.from_bytes()`.

### SecretProviderRegistry
Maps placeholder schemes to providers. Built-in providers:

- Environment variables: `${env:VAR}` or simply `${VAR}`
- Secret files: `${file:db_password}`
- HashiCorp Vault: `${vault:DB_PASSWORD}`
- AWS Secrets Manager: `${aws:api_key}`

### Shapes
Any class with a `validate_config()` method, usually a `ConfigModel`
subclass. Shapes that also define `create_client()` can be turned into live
clients with `get_client()`.

## Quick Start

```python
from sargantana.config import (
    ServerConfig,
    get,
    load_document,
    register_secret_providers,
)

document = load_document("config.yaml")
register_secret_providers(document)

server = get(document, "server", ServerConfig)
if server is None:
    raise SystemExit("missing 'server' section")
print(server.address)
```

## Formats

YAML is the default. JSON, TOML and XML are available through
`use_format()` or the `fmt` argument of the loading functions.

## Error Handling

Every failure is a `ConfigError` whose message names the section, the field
and the placeholder involved:

```
section 'server' (ServerConfig): field 'session_secret': placeholder '${vault:SESSION}': secret 'SESSION' not found in Vault at path 'secret/data/app'
```
"""

from .contracts import ClientFactory, Validatable
from .document import Document
from .errors import (
    ClientConstructionError,
    ConfigError,
    ConfigValidationError,
    ParseError,
    SecretNotFoundError,
    SecretProviderError,
    SecretResolutionError,
    UnknownSchemeError,
    UnsupportedFormatError,
)
from .expansion import Expander, expand
from .formats import ConfigFormat, get_format, use_format
from .loader import get, get_client, get_client_and_config, load, load_document
from .models import ControllerBinding, RawSection, ServerConfig
from .plugins import SecretProvider
from .providers import register_secret_providers
from .registry import (
    SecretProviderRegistry,
    get_global_registry,
    register_provider,
    unregister_provider,
)
from .secrets import (
    AWSConfig,
    AWSSecretsManagerProvider,
    EnvSecretProvider,
    FileSecretConfig,
    FileSecretProvider,
    VaultConfig,
    VaultSecretProvider,
)

__all__ = [
    # Documents and loading
    "Document",
    "load_document",
    "get",
    "load",
    "get_client",
    "get_client_and_config",
    # Formats
    "ConfigFormat",
    "use_format",
    "get_format",
    # Expansion
    "Expander",
    "expand",
    # Registry and providers
    "SecretProvider",
    "SecretProviderRegistry",
    "get_global_registry",
    "register_provider",
    "unregister_provider",
    "register_secret_providers",
    "EnvSecretProvider",
    "FileSecretProvider",
    "FileSecretConfig",
    "VaultSecretProvider",
    "VaultConfig",
    "AWSSecretsManagerProvider",
    "AWSConfig",
    # Shapes
    "Validatable",
    "ClientFactory",
    "RawSection",
    "ControllerBinding",
    "ServerConfig",
    # Errors
    "ConfigError",
    "ParseError",
    "UnsupportedFormatError",
    "SecretResolutionError",
    "UnknownSchemeError",
    "SecretNotFoundError",
    "SecretProviderError",
    "ConfigValidationError",
    "ClientConstructionError",
]
