"""
Built-in configuration shapes.

`RawSection` lets a shape keep part of its section undecoded, so that the
owner of that part (a controller, a plugin) can pick its own shape later:

```yaml
controllers:
  - type: auth
    name: login
    config:
      provider: github
      client_secret: ${vault:GITHUB_SECRET}
```

The `config` block above is captured as raw bytes in the document's format;
its placeholders are only resolved once `ControllerBinding.load()` decodes it
into a concrete shape.
"""

import builtins
from typing import Annotated, Any, TypeVar

from pydantic import BeforeValidator, PlainSerializer, PrivateAttr, SerializationInfo, ValidationInfo, model_validator

from ..models import ConfigModel
from . import formats
from .formats import ConfigFormat
from .loader import load as load_section
from .registry import SecretProviderRegistry

T = TypeVar("T")


def _context_format(context: Any) -> ConfigFormat:
    fmt = context.get("format") if isinstance(context, dict) else None
    return formats.resolve_format(fmt)


def _capture_raw(value: Any, info: ValidationInfo) -> bytes:
    if isinstance(value, bytes):
        return value
    return formats.encode(value, _context_format(info.context))


def _dump_raw(value: bytes, info: SerializationInfo) -> Any:
    return formats.decode(value, _context_format(info.context))


RawSection = Annotated[
    bytes,
    BeforeValidator(_capture_raw),
    PlainSerializer(_dump_raw, return_type=Any),
]


class ControllerBinding(ConfigModel):
    """Binding of a controller type to its private configuration block."""

    # Shadows the builtin inside the class body; annotations below use builtins.type
    type: str = ""
    name: str = ""
    config: RawSection | None = None

    _config_format: ConfigFormat | None = PrivateAttr(default=None)

    @model_validator(mode="after")
    def capture_format(self, info: ValidationInfo) -> "ControllerBinding":
        self._config_format = _context_format(info.context)
        return self

    def validate_config(self) -> None:
        if not self.type:
            raise ValueError("controller type must be set and non-empty")
        if self.config is None:
            raise ValueError("controller config must be provided")

    def load(self, shape: builtins.type[T], registry: SecretProviderRegistry | None = None) -> T:
        """Decode, expand and validate the `config` block as `shape`."""
        if self.config is None:
            raise ValueError(f"controller {self.name or self.type!r} has no config block")
        return load_section(self.config, shape, registry=registry, fmt=self._config_format)


class ServerConfig(ConfigModel):
    """Core web server settings."""

    address: str = ""
    session_name: str = ""
    session_secret: str = ""

    def validate_config(self) -> None:
        if not self.session_secret:
            raise ValueError("session_secret must be set and non-empty")
        if not self.session_name:
            raise ValueError("session_name must be set and non-empty")
        if not self.address:
            raise ValueError("address must be set and non-empty")

        _, sep, port = self.address.rpartition(":")
        if not sep or not port.isdigit() or int(port) > 65535:
            raise ValueError(f"invalid address {self.address!r}: expected host:port")
