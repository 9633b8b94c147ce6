"""
Sensor telemetry adapter package.

This package polls IoT sensor vendor APIs (HOBOlink, iMonnit), normalizes
their readings into tagged metric points, and hands them to an accumulator.
"""

from .__version__ import __version__

__all__ = ["__version__"]
