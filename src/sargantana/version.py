"""Installed version of sargantana."""

from importlib.metadata import PackageNotFoundError, version

try:
    PACKAGE_VERSION = version("sargantana")
except PackageNotFoundError:
    # Source checkout that was never installed
    PACKAGE_VERSION = "unknown"
