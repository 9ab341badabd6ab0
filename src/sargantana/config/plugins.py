"""
Plugin contract for secret providers.

A secret provider resolves the key part of a `${scheme:key}` placeholder to a
value. Providers are registered under a scheme in a
`sargantana.config.registry.SecretProviderRegistry`.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class SecretProvider(ABC):
    """
    Abstract base class for secret providers.

    ## Implementation Requirements

    - `name`: Human-readable name used in log and error messages
    - `resolve`: Return the secret for a key (the part after `scheme:`)

    ## Optional Methods

    - `cleanup`: Release clients or connections (default: no-op)

    ## Error Handling

    Providers raise the engine's own errors so that callers can tell a
    misconfiguration from a backend outage:

    ```python
    def resolve(self, key: str) -> str:
        try:
            payload = self._client.fetch(key)
        except ConnectionError as e:
            raise SecretProviderError(f"backend unreachable: {e}", key=key) from e
        if payload is None:
            raise SecretNotFoundError(f"secret {key!r} not found", key=key)
        return payload
    ```

    The registry fills in the scheme, and wraps any other exception type in
    `SecretProviderError`.

    ## Implementation Example

    ```python
    from sargantana.config import SecretProvider, SecretProviderRegistry

    class DictSecretProvider(SecretProvider):
        '''Resolve secrets from an in-memory mapping, handy in tests.'''

        def __init__(self, secrets: dict[str, str]):
            self._secrets = dict(secrets)

        @property
        def name(self) -> str:
            return "Dict"

        def resolve(self, key: str) -> str:
            if key not in self._secrets:
                raise SecretNotFoundError(f"secret {key!r} not found", key=key)
            return self._secrets[key]

    registry = SecretProviderRegistry()
    registry.register("dict", DictSecretProvider({"token": "abc"}))
    registry.resolve("dict", "token")  # "abc"
    ```

    ## Thread Safety

    The registry calls `resolve` without holding any lock, possibly from
    several threads at once. Providers that keep mutable state or wrap
    non-thread-safe clients must lock internally.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the human-readable name of this provider."""

    @abstractmethod
    def resolve(self, key: str) -> str:
        """Resolve a key to its secret value."""

    def cleanup(self) -> None:
        """
        Release any clients or connections held by this provider.
        This method should be idempotent - safe to call multiple times.
        """
        return None

    def __enter__(self) -> "SecretProvider":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
