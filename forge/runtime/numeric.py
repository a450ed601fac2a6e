"""
Lenient number parsing for flag values.

Flag values authored in scripts and editors are loosely typed. Parsing
takes the longest numeric prefix of a string ("12 coins" -> 12.0) and
yields NaN when there is none.
"""

from __future__ import annotations

import math
import re
from typing import Any

_FLOAT_PREFIX = re.compile(
    r'^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))'
)


def parse_float(text: str) -> float:
    """Parse the leading number in ``text``; NaN if there is none."""
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return math.nan
    token = match.group(1)
    if token.lstrip('+-') == 'Infinity':
        return -math.inf if token.startswith('-') else math.inf
    return float(token)


def to_string(value: Any) -> str:
    """String form of a flag value as scripts spell it."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def coerce_number(value: Any) -> float:
    """
    Coerce a stored flag value for arithmetic.

    Missing -> 0, bool -> 1/0, numeric strings parsed, anything
    unparsable -> 0.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        parsed = parse_float(value)
        return 0 if math.isnan(parsed) else parsed
    return 0


def normalize_number(value: float) -> int | float:
    """Collapse integral floats to int so 3.0 is stored and shown as 3."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
