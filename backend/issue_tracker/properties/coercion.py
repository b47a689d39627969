"""
Value coercion shared by processors and filter transformers.

Stored values are always text; numeric types also carry a float projection.
"""

from __future__ import annotations

import math
from typing import Any

__all__ = [
    "is_blank",
    "is_scalar_input",
    "to_number",
    "to_text",
]


def is_scalar_input(value: Any) -> bool:
    """True for str, int and float. bool is a subclass of int and is rejected."""
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def is_blank(value: Any) -> bool:
    """None or a whitespace-only string."""
    return value is None or (isinstance(value, str) and value.strip() == "")


def to_text(value: Any) -> str:
    """Render a raw input value the way it is stored in the value column."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> float | None:
    """Parse a finite number from a number or numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None
