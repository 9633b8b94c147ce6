"""
Validation utilities for numeric reading text.

Vendor APIs report readings as free-form strings. These helpers convert the
numeric parts of those strings to floats without raising, so a single bad
token degrades one field instead of the whole observation.
"""

import logging
import math
from typing import Optional

logger = logging.getLogger(__name__)


def is_valid_float(value: float) -> bool:
    """
    Check if a float value is finite.

    Parameters
    ----------
    value : float
        The float value to check

    Returns
    -------
    bool
        True if the value is finite (not inf, -inf, or nan), False otherwise

    Examples
    --------
    >>> is_valid_float(42.5)
    True
    >>> is_valid_float(float('nan'))
    False
    """
    return math.isfinite(value)


def parse_float(text: Optional[str]) -> Optional[float]:
    """
    Parse a numeric token, returning None when it is not a finite number.

    Parameters
    ----------
    text : str or None
        Token to parse. Surrounding whitespace is ignored.

    Returns
    -------
    float or None
        Parsed value, or None if the token is missing, not numeric, or not
        finite.

    Examples
    --------
    >>> parse_float("-4.2")
    -4.2
    >>> parse_float(" 12 ")
    12.0
    >>> parse_float("A") is None
    True
    >>> parse_float("nan") is None
    True
    """
    if text is None:
        return None
    candidate = text.strip()
    if not candidate:
        return None
    try:
        value = float(candidate)
    except ValueError:
        logger.debug(
            "validation.parse_float.invalid",
            extra={"invalid_value": candidate},
        )
        return None
    if not is_valid_float(value):
        logger.debug(
            "validation.parse_float.non_finite",
            extra={"invalid_value": candidate},
        )
        return None
    return value
