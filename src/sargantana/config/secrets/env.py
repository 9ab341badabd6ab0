"""
Environment variable provider.

Resolves `${env:NAME}` and the bare `${NAME}` form (env is the default
scheme) from the process environment.
"""

import logging
import os

from ..errors import SecretNotFoundError
from ..plugins import SecretProvider

logger = logging.getLogger(__name__)


class EnvSecretProvider(SecretProvider):
    """Provider for environment variables.

    An unset variable is an error. A variable that is set to the empty string
    resolves to "" and only logs a warning, so configurations can opt out of
    a value explicitly.
    """

    @property
    def name(self) -> str:
        return "Environment"

    def resolve(self, key: str) -> str:
        if not key:
            raise SecretNotFoundError("no environment variable name given", key=key)

        value = os.environ.get(key)
        if value is None:
            raise SecretNotFoundError(f"environment variable {key!r} is not set", key=key)

        if value == "":
            logger.warning(f"Environment variable {key} is set but empty")
        else:
            logger.debug(f"Retrieved value from environment variable {key}")
        return value
