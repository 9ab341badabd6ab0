"""
Typed loading of configuration sections.

Every request runs the same pipeline on the stored raw bytes:

1. decode the bytes with the document's format
2. build a brand-new instance of the requested shape (pydantic)
3. expand `${...}` placeholders through the secret provider registry
4. call the shape's `validate_config()`

Nothing is cached, so two requests for the same section always return equal
but fully independent instances.
"""

import collections.abc
import dataclasses
import functools
import logging
import os
import types
from pathlib import Path
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from . import formats
from .contracts import ClientFactory
from .document import Document
from .errors import ClientConstructionError, ConfigError, ConfigValidationError
from .expansion import Expander
from .formats import ConfigFormat
from .registry import SecretProviderRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")
ClientT = TypeVar("ClientT")

CONFIG_ENV_VAR = "SARGANTANA_CONFIG"


def load_document(path: str | Path | None = None, fmt: ConfigFormat | str | None = None) -> Document:
    """Load a configuration document from disk.

    Args:
        path: Optional path to the configuration file.
              If not provided, looks for:
              1. SARGANTANA_CONFIG environment variable
              2. ./config.<ext> for the active format (e.g. ./config.yaml)

    Returns:
        The loaded Document

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ParseError: If the file is not a valid document
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path)
        else:
            path = Path.cwd() / formats.resolve_format(fmt).default_filename

    return Document.from_file(path, fmt)


def get(
    document: Document,
    name: str,
    shape: type[T],
    *,
    registry: SecretProviderRegistry | None = None,
) -> T | None:
    """Decode, expand and validate a section of `document` as `shape`.

    Returns:
        A new instance of `shape`, or None when the section is absent. An
        absent section is not an error: callers decide whether it is required.

    Raises:
        ParseError: The section bytes are malformed
        SecretResolutionError: A placeholder could not be resolved
        ConfigValidationError: The section does not fit the shape or fails
            its `validate_config()`
    """
    _check_shape(shape)
    logger.debug(f"Getting configuration section {name!r}")

    raw = document.raw(name)
    if raw is None:
        logger.debug(f"Configuration section {name!r} not found")
        return None

    return _load(raw, shape, registry, document.format, f"section {name!r} ({shape.__name__})")


def load(
    raw: bytes,
    shape: type[T],
    *,
    registry: SecretProviderRegistry | None = None,
    fmt: ConfigFormat | str | None = None,
) -> T:
    """Run the `get()` pipeline directly on raw bytes.

    Used for sub-documents handed over by an enclosing structure, such as the
    `config` block of a `ControllerBinding`.
    """
    _check_shape(shape)
    return _load(raw, shape, registry, formats.resolve_format(fmt), shape.__name__)


def get_client(
    document: Document,
    name: str,
    shape: type[ClientFactory[ClientT]],
    *,
    registry: SecretProviderRegistry | None = None,
) -> ClientT | None:
    """Load a client-factory section and build its client.

    Returns None when the section is absent.

    Raises:
        ConfigValidationError: The section is invalid
        ClientConstructionError: `create_client()` failed on a valid section
    """
    client, _ = get_client_and_config(document, name, shape, registry=registry)
    return client


def get_client_and_config(
    document: Document,
    name: str,
    shape: type[ClientFactory[ClientT]],
    *,
    registry: SecretProviderRegistry | None = None,
) -> tuple[ClientT, Any] | tuple[None, None]:
    """Like `get_client()`, but also return the validated configuration."""
    config = get(document, name, shape, registry=registry)
    if config is None:
        return None, None

    logger.debug(f"Creating client from configuration section {name!r}")
    try:
        client = config.create_client()
    except ClientConstructionError as e:
        e.add_context(f"section {name!r} ({shape.__name__})")
        raise
    except Exception as e:
        raise ClientConstructionError(f"failed to create client: {e}").add_context(
            f"section {name!r} ({shape.__name__})"
        ) from e
    return client, config


def _load(
    raw: bytes,
    shape: type[T],
    registry: SecretProviderRegistry | None,
    fmt: ConfigFormat,
    description: str,
) -> T:
    try:
        data = formats.decode(raw, fmt)
        if data is None:
            data = {}

        logger.debug(f"Decoding configuration into {shape.__name__}")
        instance = _construct(shape, data, fmt)

        instance = Expander(registry).expand(instance)

        logger.debug(f"Validating configuration {shape.__name__}")
        _validate(instance)
    except ConfigError as e:
        e.add_context(description)
        raise
    return instance


_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def _align_xml_lists(annotation: Any, data: Any) -> Any:
    """Wrap single XML elements in a list wherever `annotation` expects one.

    XML has no list marker: one `<hosts>` element decodes to a scalar or a
    mapping, two decode to a list. The target annotation decides.
    """
    origin = get_origin(annotation)
    if origin is Annotated:
        return _align_xml_lists(get_args(annotation)[0], data)
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(annotation) if a is not type(None)]
        if len(members) != 1:
            return data
        return _align_xml_lists(members[0], data)

    if origin in _SEQUENCE_ORIGINS:
        if data is None:
            return data
        if not isinstance(data, list):
            data = [data]
        args = get_args(annotation)
        item = args[0] if len(args) == 1 or (len(args) == 2 and args[1] is Ellipsis) else Any
        return [_align_xml_lists(item, value) for value in data]

    if origin in _MAPPING_ORIGINS:
        args = get_args(annotation)
        if len(args) != 2 or not isinstance(data, dict):
            return data
        return {key: _align_xml_lists(args[1], value) for key, value in data.items()}

    if not isinstance(data, dict) or not isinstance(annotation, type):
        return data
    if issubclass(annotation, BaseModel):
        fields = {field.alias or name: field.annotation for name, field in annotation.model_fields.items()}
    elif dataclasses.is_dataclass(annotation):
        hints = get_type_hints(annotation, include_extras=True)
        fields = {f.name: hints.get(f.name, Any) for f in dataclasses.fields(annotation)}
    else:
        return data
    return {
        key: _align_xml_lists(fields[key], value) if key in fields else value
        for key, value in data.items()
    }


def _construct(shape: type[T], data: Any, fmt: ConfigFormat) -> T:
    if fmt is ConfigFormat.XML:
        data = _align_xml_lists(shape, data)
    try:
        return _adapter_for(shape).validate_python(data, context={"format": fmt})
    except PydanticValidationError as e:
        raise ConfigValidationError(f"does not match {shape.__name__}: {e}") from e


def _validate(instance: Any) -> None:
    try:
        instance.validate_config()
    except ConfigValidationError:
        raise
    except Exception as e:
        raise ConfigValidationError(f"configuration is invalid: {e}") from e


def _check_shape(shape: type) -> None:
    if not callable(getattr(shape, "validate_config", None)):
        raise TypeError(f"{shape.__name__} does not implement validate_config()")


@functools.lru_cache(maxsize=None)
def _adapter_for(shape: type[T]) -> TypeAdapter[T]:
    # Adapters only hold schema information, never decoded data
    return TypeAdapter(shape)
