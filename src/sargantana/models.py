"""Base Pydantic model for sargantana configuration shapes.

Every configuration record that wants to be loaded through
`sargantana.config.get` should inherit from `ConfigModel`. It establishes:

- Strict field checking (unknown keys in a section are rejected)
- Mutable instances, since every load hands the caller a private copy
- A default `validate_config()` hook that accepts everything

Example:
    >>> from sargantana.models import ConfigModel
    >>>
    >>> class RedisConfig(ConfigModel):
    ...     address: str
    ...     max_idle: int = 0
    ...
    ...     def validate_config(self) -> None:
    ...         if not self.address:
    ...             raise ValueError("redis address must be set and non-empty")
"""

from pydantic import BaseModel, ConfigDict


class ConfigModel(BaseModel):
    """Base model for all configuration shapes.

    - extra="forbid": Rejects keys not defined in the shape
    - frozen=False: Callers own the returned instance and may change it

    Subclasses override `validate_config()` to enforce business rules that
    must hold after secret placeholders have been resolved. It should raise
    an exception with a descriptive message when the instance is unusable.
    """

    model_config = ConfigDict(extra="forbid", frozen=False)

    def validate_config(self) -> None:
        """Check the resolved instance. Override to add rules."""
        return None
