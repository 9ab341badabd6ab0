"""Contracts implemented by configuration shapes."""

from typing import Protocol, TypeVar, runtime_checkable

ClientT = TypeVar("ClientT", covariant=True)


@runtime_checkable
class Validatable(Protocol):
    """A shape that can check itself once placeholders are resolved.

    `validate_config()` returns nothing on success and raises an exception
    describing the problem otherwise.
    """

    def validate_config(self) -> None: ...


@runtime_checkable
class ClientFactory(Validatable, Protocol[ClientT]):
    """A validatable shape that can also build a live client from its fields."""

    def create_client(self) -> ClientT: ...
