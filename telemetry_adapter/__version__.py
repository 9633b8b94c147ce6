"""
Version information for the sensor telemetry adapter.

The package version is read from the installed distribution metadata so that
pyproject.toml stays the single source of truth.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sensor-telemetry-adapter")
except PackageNotFoundError:
    # Development checkout without an install
    __version__ = "0.0.0-dev"
