"""
Serialization formats for configuration documents.

A document is written in exactly one of a small, closed set of formats. The
active format is a process-wide setting (YAML unless changed with
`use_format()`); every call below also accepts an explicit format override.

`decode()` turns raw bytes into plain Python data (dicts, lists, scalars) and
`encode()` does the reverse. Encoding is used to capture a section's
sub-document as raw bytes before the shape it will be decoded into is known,
so `decode(encode(x))` must give back an equivalent value for every format.
"""

import json
import logging
import threading
import tomllib
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any

import tomli_w
import yaml
from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeET
from pydantic import BaseModel

from .errors import ParseError, UnsupportedFormatError

logger = logging.getLogger(__name__)


class ConfigFormat(str, Enum):
    """Supported document formats."""

    YAML = "yaml"
    JSON = "json"
    TOML = "toml"
    XML = "xml"

    @property
    def default_filename(self) -> str:
        return f"config.{self.value}"


class FormatAdapter(ABC):
    """Translate between raw bytes and plain Python data for one format."""

    format: ConfigFormat

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """Parse raw bytes. Raises ParseError on malformed input."""

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """Serialize plain Python data."""


class YamlAdapter(FormatAdapter):
    format = ConfigFormat.YAML

    def decode(self, data: bytes) -> Any:
        try:
            return yaml.safe_load(data)
        except yaml.YAMLError as e:
            raise ParseError(f"invalid yaml: {e}", self.format.value) from e

    def encode(self, value: Any) -> bytes:
        try:
            text = yaml.safe_dump(value, sort_keys=False, allow_unicode=True)
        except yaml.YAMLError as e:
            raise ParseError(f"cannot encode value as yaml: {e}", self.format.value) from e
        return text.encode("utf-8")


class JsonAdapter(FormatAdapter):
    format = ConfigFormat.JSON

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"invalid json: {e}", self.format.value) from e

    def encode(self, value: Any) -> bytes:
        try:
            return json.dumps(value, indent=2).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ParseError(f"cannot encode value as json: {e}", self.format.value) from e


class TomlAdapter(FormatAdapter):
    """TOML documents.

    TOML has no null and its top level must be a table: `None` entries are
    dropped and any other top-level value is wrapped under `SCALAR_KEY`.
    """

    format = ConfigFormat.TOML
    SCALAR_KEY = "__value__"

    def decode(self, data: bytes) -> Any:
        try:
            parsed = tomllib.loads(data.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"invalid toml: {e}", self.format.value) from e
        if set(parsed) == {self.SCALAR_KEY}:
            return parsed[self.SCALAR_KEY]
        return parsed

    def encode(self, value: Any) -> bytes:
        if not isinstance(value, Mapping):
            value = {self.SCALAR_KEY: value}
        try:
            return tomli_w.dumps(_drop_none(value)).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ParseError(f"cannot encode value as toml: {e}", self.format.value) from e


class XmlAdapter(FormatAdapter):
    """XML documents.

    The root element wraps the value. Elements with children are mappings,
    repeated sibling tags and elements marked `kind="list"` (with `<item>`
    children) are sequences, `nil="true"` marks null and leaf text is a
    stripped string. Scalars come back as strings; shapes coerce them.
    """

    format = ConfigFormat.XML
    ROOT_TAG = "config"
    ITEM_TAG = "item"
    KIND_ATTR = "kind"
    NIL_ATTR = "nil"

    def decode(self, data: bytes) -> Any:
        try:
            root = SafeET.fromstring(data)
        except (ET.ParseError, DefusedXmlException) as e:
            raise ParseError(f"invalid xml: {e}", self.format.value) from e
        if len(root) == 0 and not (root.text or "").strip() and not root.attrib:
            return None
        return self._to_value(root)

    def encode(self, value: Any) -> bytes:
        return ET.tostring(self._to_element(self.ROOT_TAG, value), encoding="utf-8")

    def _to_value(self, elem: ET.Element) -> Any:
        if elem.get(self.NIL_ATTR) == "true":
            return None
        kind = elem.get(self.KIND_ATTR)
        children = list(elem)
        if kind == "list":
            return [self._to_value(child) for child in children]
        if kind == "map" or children:
            grouped: dict[str, list[Any]] = {}
            for child in children:
                grouped.setdefault(child.tag, []).append(self._to_value(child))
            return {tag: values[0] if len(values) == 1 else values for tag, values in grouped.items()}
        return (elem.text or "").strip()

    def _to_element(self, tag: str, value: Any) -> ET.Element:
        elem = ET.Element(tag)
        if value is None:
            elem.set(self.NIL_ATTR, "true")
        elif isinstance(value, Mapping):
            if not value:
                elem.set(self.KIND_ATTR, "map")
            for key, item in value.items():
                elem.append(self._to_element(str(key), item))
        elif isinstance(value, (list, tuple, set, frozenset)):
            elem.set(self.KIND_ATTR, "list")
            for item in value:
                elem.append(self._to_element(self.ITEM_TAG, item))
        elif isinstance(value, bool):
            elem.text = "true" if value else "false"
        else:
            elem.text = str(value)
        return elem


_ADAPTERS: dict[ConfigFormat, FormatAdapter] = {
    adapter.format: adapter
    for adapter in (YamlAdapter(), JsonAdapter(), TomlAdapter(), XmlAdapter())
}

_format_lock = threading.Lock()
_active_format = ConfigFormat.YAML


def resolve_format(fmt: ConfigFormat | str | None = None) -> ConfigFormat:
    """Normalize a format name, falling back to the process-wide setting."""
    if fmt is None:
        return get_format()
    if isinstance(fmt, ConfigFormat):
        return fmt
    try:
        return ConfigFormat(str(fmt).lower())
    except ValueError:
        raise UnsupportedFormatError(str(fmt)) from None


def use_format(fmt: ConfigFormat | str) -> None:
    """Set the process-wide document format."""
    global _active_format
    resolved = resolve_format(fmt)
    get_adapter(resolved)
    with _format_lock:
        _active_format = resolved
    logger.debug(f"Using configuration format: {resolved.value}")


def get_format() -> ConfigFormat:
    """Return the process-wide document format."""
    with _format_lock:
        return _active_format


def get_adapter(fmt: ConfigFormat | str | None = None) -> FormatAdapter:
    resolved = resolve_format(fmt)
    adapter = _ADAPTERS.get(resolved)
    if adapter is None:
        raise UnsupportedFormatError(resolved.value)
    return adapter


def decode(data: bytes, fmt: ConfigFormat | str | None = None) -> Any:
    """Decode raw bytes into plain Python data."""
    return get_adapter(fmt).decode(data)


def encode(value: Any, fmt: ConfigFormat | str | None = None) -> bytes:
    """Encode a value (plain data, pydantic model or dataclass) to raw bytes."""
    return get_adapter(fmt).encode(to_plain(value))


def to_plain(value: Any) -> Any:
    """Reduce models and dataclasses to plain dicts, lists and scalars."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if is_dataclass(value) and not isinstance(value, type):
        return to_plain(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(item) for item in value]
    return value


def _drop_none(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _drop_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [_drop_none(item) for item in value]
    return value
