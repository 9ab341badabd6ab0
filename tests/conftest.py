"""
Global pytest configuration and fixtures.
"""

import pytest

from sargantana.config import formats
from sargantana.config.registry import SecretProviderRegistry


@pytest.fixture
def registry() -> SecretProviderRegistry:
    """Isolated registry with only the environment provider registered."""
    registry = SecretProviderRegistry.with_defaults()
    yield registry
    registry.cleanup_all()


@pytest.fixture(autouse=True)
def reset_format():
    """Restore the process-wide document format after every test.

    Tests that switch formats with `use_format()` would otherwise leak the
    setting into every test that runs after them.
    """
    original = formats.get_format()
    yield
    formats.use_format(original)
