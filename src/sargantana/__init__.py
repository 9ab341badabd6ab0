"""sargantana - typed configuration loading with pluggable secret resolution.

The interesting parts live in `sargantana.config`:

- `Document`: a loaded configuration file, kept as raw per-section bytes
- `get` / `load`: decode a section into a typed shape, resolve `${...}`
  placeholders and validate the result
- `SecretProviderRegistry`: scheme -> provider mapping used for `${scheme:key}`
- Built-in providers for environment variables, secret files, HashiCorp
  Vault and AWS Secrets Manager
"""

from .version import PACKAGE_VERSION

__version__ = PACKAGE_VERSION

__all__ = ["PACKAGE_VERSION", "__version__"]
