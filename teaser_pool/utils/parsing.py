"""
Generic, format-agnostic parsing utilities.

Feed payloads carry numbers as strings, numbers, or nothing at all; these
helpers never raise.
"""

from __future__ import annotations


def parse_int(value: str | int | float | None) -> int | None:
    """Parse a value to an integer, handling common edge cases.

    Accepts strings, ints, floats, or None. Returns None for empty strings,
    "-", and anything non-numeric.
    """
    if value in (None, "", "-"):
        return None
    if isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return None


def parse_float(value: str | int | float | None) -> float | None:
    """Parse a value to a float, returning None when it is not numeric."""
    if value in (None, "", "-"):
        return None
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None
