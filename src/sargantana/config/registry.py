"""
Registry mapping placeholder schemes to secret providers.

A placeholder `${vault:DB_PASSWORD}` is resolved by looking up the provider
registered under `vault` and asking it for `DB_PASSWORD`. A placeholder
without a scheme, `${PORT}`, uses the registry's default scheme (`env`).

Registries are ordinary objects: service bootstrap code builds one, registers
the providers it needs and passes it to `get()`/`load()`. A process-wide
registry (with only the environment provider) backs callers that do not pass
one explicitly.
"""

import logging
import threading
from typing import Any

from .errors import SecretProviderError, SecretResolutionError, UnknownSchemeError
from .plugins import SecretProvider
from .secrets.env import EnvSecretProvider

logger = logging.getLogger(__name__)

DEFAULT_SCHEME = "env"


class SecretProviderRegistry:
    """Thread-safe scheme -> provider registry.

    Registration, removal and lookup are serialized by a single lock. The
    lock is released before a provider is called, so a slow backend never
    blocks unrelated resolutions or registrations.

    Example:
        ```python
        registry = SecretProviderRegistry()
        registry.register("env", EnvSecretProvider())
        registry.register("file", FileSecretProvider("/run/secrets"))

        registry.resolve("file", "db_password")
        registry.resolve_property("PORT")  # default scheme
        ```
    """

    def __init__(self, default_scheme: str = DEFAULT_SCHEME):
        self.default_scheme = default_scheme
        self._providers: dict[str, SecretProvider] = {}
        self._lock = threading.Lock()

    @classmethod
    def with_defaults(cls) -> "SecretProviderRegistry":
        """Create a registry with the environment provider registered."""
        registry = cls()
        registry.register(DEFAULT_SCHEME, EnvSecretProvider())
        return registry

    def register(self, scheme: str, provider: SecretProvider) -> None:
        """Register a provider, replacing any provider already using the scheme."""
        if not scheme or ":" in scheme:
            raise ValueError(f"invalid secret provider scheme: {scheme!r}")

        with self._lock:
            replaced = self._providers.get(scheme)
            self._providers[scheme] = provider

        if replaced is not None:
            logger.warning(f"Overriding existing secret provider for scheme {scheme!r}")
        logger.debug(f"Registered secret provider {provider.name} for scheme {scheme!r}")

    def unregister(self, scheme: str) -> SecretProvider | None:
        """Remove and return the provider for a scheme, if any."""
        with self._lock:
            provider = self._providers.pop(scheme, None)
        if provider is not None:
            logger.debug(f"Unregistered secret provider for scheme {scheme!r}")
        return provider

    def get_provider(self, scheme: str) -> SecretProvider | None:
        with self._lock:
            return self._providers.get(scheme)

    def list_schemes(self) -> list[str]:
        with self._lock:
            return sorted(self._providers)

    def resolve(self, scheme: str, key: str) -> str:
        """Resolve `key` with the provider registered for `scheme`.

        Raises:
            UnknownSchemeError: No provider is registered for the scheme
            SecretNotFoundError: The provider does not know the key
            SecretProviderError: The provider's backend failed
        """
        provider = self.get_provider(scheme)
        if provider is None:
            raise UnknownSchemeError(scheme, key)

        try:
            return provider.resolve(key)
        except SecretResolutionError as e:
            if e.scheme is None:
                e.scheme = scheme
            if e.key is None:
                e.key = key
            raise
        except Exception as e:
            raise SecretProviderError(
                f"{provider.name} provider failed to resolve {key!r}: {e}",
                scheme=scheme,
                key=key,
            ) from e

    def resolve_property(self, prop: str) -> str:
        """Resolve a `scheme:key` or bare `key` property."""
        scheme, key = self.parse_property(prop)
        return self.resolve(scheme, key)

    def parse_property(self, prop: str) -> tuple[str, str]:
        """Split a property on its first colon.

        Examples:
            "vault:SECRET_KEY" -> ("vault", "SECRET_KEY")
            "PORT"             -> (default scheme, "PORT")
            "custom:db:pass"   -> ("custom", "db:pass")
        """
        scheme, sep, key = prop.partition(":")
        if not sep:
            return self.default_scheme, prop
        return scheme, key

    def cleanup_all(self) -> None:
        """Clean up all registered providers."""
        with self._lock:
            providers = list(self._providers.values())
        for provider in providers:
            try:
                provider.cleanup()
            except Exception as e:
                logger.warning(f"Error cleaning up secret provider {provider.name}: {e}")

    def __contains__(self, scheme: object) -> bool:
        with self._lock:
            return scheme in self._providers

    def __enter__(self) -> "SecretProviderRegistry":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.cleanup_all()


# Global registry instance
_global_registry = SecretProviderRegistry.with_defaults()


def get_global_registry() -> SecretProviderRegistry:
    """Get the process-wide registry used when no registry is passed."""
    return _global_registry


def register_provider(scheme: str, provider: SecretProvider) -> None:
    """Register a provider with the process-wide registry."""
    _global_registry.register(scheme, provider)


def unregister_provider(scheme: str) -> SecretProvider | None:
    """Remove a provider from the process-wide registry."""
    return _global_registry.unregister(scheme)
