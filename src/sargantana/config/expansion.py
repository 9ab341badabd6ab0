"""
Placeholder expansion over arbitrary configuration values.

`Expander.expand()` walks a value depth-first and substitutes every
`${scheme:key}` / `${key}` placeholder found in its strings:

- strings: stripped, then each placeholder is resolved through the registry
- records (pydantic models, dataclasses): every field
- `None`: left alone
- sequences (list, tuple, set): every element
- mappings: every value, written back under the same key of a copy
- anything else (numbers, booleans, bytes, enums): left alone

The input is never modified. A new value is built while walking and only
returned once every placeholder resolved, so a failure leaves nothing
half-expanded behind.
"""

import copy
import dataclasses
import logging
import re
from collections.abc import Mapping, MutableMapping
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

from .errors import ConfigError
from .registry import SecretProviderRegistry, get_global_registry

logger = logging.getLogger(__name__)

T = TypeVar("T")

PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]*)\}")

Path = tuple[str | int, ...]


def find_placeholders(value: str) -> list[str]:
    """Return the bodies of all `${...}` placeholders in a string."""
    return PLACEHOLDER_PATTERN.findall(value)


class Expander:
    """Resolve placeholders in configuration values.

    Args:
        registry: Registry used to resolve placeholders. Defaults to the
            process-wide registry.
        default_scheme: Scheme for placeholders without a `scheme:` prefix.
            Defaults to the registry's default scheme.
    """

    def __init__(
        self,
        registry: SecretProviderRegistry | None = None,
        default_scheme: str | None = None,
    ):
        self.registry = registry if registry is not None else get_global_registry()
        self.default_scheme = default_scheme or self.registry.default_scheme

    def expand(self, value: T) -> T:
        """Return an expanded copy of `value`.

        Raises:
            SecretResolutionError: A placeholder could not be resolved; the
                error names the field path and the placeholder.
        """
        logger.debug(f"Expanding placeholders in {type(value).__name__}")
        return self._expand(value, ())

    def expand_string(self, value: str) -> str:
        """Strip a string and substitute its placeholders."""
        return PLACEHOLDER_PATTERN.sub(self._substitute, value.strip())

    def _substitute(self, match: re.Match[str]) -> str:
        body = match.group(1)
        scheme, sep, key = body.partition(":")
        if not sep:
            scheme, key = self.default_scheme, body
        try:
            return self.registry.resolve(scheme, key)
        except ConfigError as e:
            e.add_context(f"placeholder {match.group(0)!r}")
            raise

    def _expand(self, value: Any, path: Path) -> Any:
        if value is None or isinstance(value, Enum):
            return value
        if isinstance(value, str):
            try:
                return self.expand_string(value)
            except ConfigError as e:
                if path:
                    e.add_context(f"field {_format_path(path)!r}")
                raise
        if isinstance(value, BaseModel):
            return self._expand_model(value, path)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return self._expand_dataclass(value, path)
        if isinstance(value, Mapping):
            return self._expand_mapping(value, path)
        if isinstance(value, list):
            result = copy.copy(value)
            for index, item in enumerate(value):
                result[index] = self._expand(item, path + (index,))
            return result
        if isinstance(value, tuple):
            items = [self._expand(item, path + (index,)) for index, item in enumerate(value)]
            if hasattr(value, "_fields"):
                return type(value)(*items)
            return type(value)(items)
        if isinstance(value, (set, frozenset)):
            return type(value)(self._expand(item, path) for item in value)
        return value

    def _expand_model(self, model: BaseModel, path: Path) -> BaseModel:
        updates = {
            name: self._expand(getattr(model, name), path + (name,))
            for name in type(model).model_fields
        }
        for name, item in (model.model_extra or {}).items():
            updates[name] = self._expand(item, path + (name,))
        return model.model_copy(update=updates)

    def _expand_dataclass(self, obj: Any, path: Path) -> Any:
        result = copy.copy(obj)
        for field in dataclasses.fields(obj):
            expanded = self._expand(getattr(obj, field.name), path + (field.name,))
            # object.__setattr__ also works for frozen dataclasses
            object.__setattr__(result, field.name, expanded)
        return result

    def _expand_mapping(self, mapping: Mapping[Any, Any], path: Path) -> Mapping[Any, Any]:
        if isinstance(mapping, MutableMapping):
            result = copy.copy(mapping)
        else:
            result = dict(mapping)
        for key in list(mapping.keys()):
            result[key] = self._expand(mapping[key], path + (str(key),))
        return result


def expand(value: T, registry: SecretProviderRegistry | None = None) -> T:
    """Expand placeholders in `value` with a one-off `Expander`."""
    return Expander(registry).expand(value)


def _format_path(path: Path) -> str:
    parts: list[str] = []
    for part in path:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        elif parts:
            parts.append(f".{part}")
        else:
            parts.append(part)
    return "".join(parts)
