"""Exceptions raised by the configuration engine.

All errors derive from `ConfigError`. As an error travels outwards it picks
up context (placeholder, field, section) through `add_context()`, so the final
message reads from the outermost location to the root cause:

    section 'redis' (RedisConfig): field 'password': placeholder '${vault:REDIS}': ...
"""


class ConfigError(Exception):
    """Base class for every configuration engine failure."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.context: list[str] = []

    def add_context(self, context: str) -> "ConfigError":
        """Prepend a location to the error message and return the error."""
        self.context.insert(0, context)
        return self

    def __str__(self) -> str:
        return ": ".join([*self.context, self.message])


class ParseError(ConfigError):
    """Raw bytes do not conform to the declared serialization format."""

    def __init__(self, message: str, fmt: str | None = None):
        super().__init__(message)
        self.format = fmt


class UnsupportedFormatError(ConfigError):
    """The requested serialization format has no adapter."""

    def __init__(self, fmt: str):
        super().__init__(f"unsupported format: {fmt!r}")
        self.format = fmt


class SecretResolutionError(ConfigError):
    """Base class for failures while resolving a `${scheme:key}` placeholder."""

    def __init__(self, message: str, scheme: str | None = None, key: str | None = None):
        super().__init__(message)
        self.scheme = scheme
        self.key = key


class UnknownSchemeError(SecretResolutionError):
    """No provider is registered for the placeholder's scheme."""

    def __init__(self, scheme: str, key: str | None = None):
        message = f"no secret provider registered for scheme {scheme!r}"
        if key is not None:
            message += f" (key {key!r})"
        super().__init__(message, scheme=scheme, key=key)


class SecretNotFoundError(SecretResolutionError):
    """The provider works but does not know the requested key."""


class SecretProviderError(SecretResolutionError):
    """The provider's backend failed (I/O, authentication, network, misconfiguration)."""


class ConfigValidationError(ConfigError):
    """A decoded and expanded instance does not satisfy its shape."""


class ClientConstructionError(ConfigError):
    """A validated shape failed to build its client."""
