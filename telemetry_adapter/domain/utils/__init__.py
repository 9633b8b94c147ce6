"""
Helper utilities for reading normalization.

Exports commonly used helpers for parsing numeric reading text.
"""

from .validation import is_valid_float, parse_float

__all__ = ["is_valid_float", "parse_float"]
