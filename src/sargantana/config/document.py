"""
Raw configuration documents.

A `Document` is a loaded configuration file split into sections. Each section
is kept as the raw bytes of its sub-document, re-encoded in the document's
format, so that nothing about its shape is decided until a caller asks for a
typed view with `sargantana.config.get()`.

```yaml
server:
  address: ${env:HOST}:8080
redis:
  address: localhost:6379
```

gives a document with the sections `server` and `redis`.
"""

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from . import formats
from .errors import ConfigError, ParseError
from .formats import ConfigFormat

logger = logging.getLogger(__name__)


class Document:
    """Immutable mapping of section name to raw section bytes.

    Args:
        sections: Raw bytes per section, encoded in `fmt`
        fmt: Format of the raw bytes. Defaults to the process-wide format at
            construction time; later changes of that setting do not affect
            an existing document.
    """

    def __init__(self, sections: Mapping[str, bytes], fmt: ConfigFormat | str | None = None):
        self.format = formats.resolve_format(fmt)
        self._sections: Mapping[str, bytes] = MappingProxyType(
            {str(name): bytes(raw) for name, raw in sections.items()}
        )

    @classmethod
    def from_bytes(cls, data: bytes, fmt: ConfigFormat | str | None = None) -> "Document":
        """Split a whole document into raw sections.

        Raises:
            ParseError: The data is malformed or its top level is not a mapping
        """
        resolved = formats.resolve_format(fmt)
        parsed = formats.decode(data, resolved)
        if parsed is None:
            parsed = {}
        if not isinstance(parsed, Mapping):
            raise ParseError(
                f"top level of a configuration document must be a mapping, got {type(parsed).__name__}",
                resolved.value,
            )

        sections = {str(name): formats.encode(value, resolved) for name, value in parsed.items()}
        logger.debug(f"Loaded configuration document with sections: {sorted(sections)}")
        return cls(sections, resolved)

    @classmethod
    def from_file(cls, path: str | Path, fmt: ConfigFormat | str | None = None) -> "Document":
        """Read and split a configuration file."""
        path = Path(path)
        logger.debug(f"Loading configuration file: {path}")
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {path}") from None

        try:
            return cls.from_bytes(data, fmt)
        except ConfigError as e:
            e.add_context(f"configuration file {str(path)!r}")
            raise

    def raw(self, name: str) -> bytes | None:
        """Return the raw bytes of a section, or None when it is absent."""
        return self._sections.get(name)

    def section_names(self) -> list[str]:
        return list(self._sections)

    def __contains__(self, name: object) -> bool:
        return name in self._sections

    def __iter__(self) -> Iterator[str]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __repr__(self) -> str:
        return f"Document(format={self.format.value!r}, sections={self.section_names()!r})"
