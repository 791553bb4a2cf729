"""Lenient numeric extraction for messy spreadsheet cells."""

import math
import re
from typing import Any

# First signed decimal anywhere in the cell: "$1,200" -> 1, "45kg" -> 45.
NUMBER_PATTERN = re.compile(r"-?\d+(\.\d+)?")

# Leading float prefix, as a lenient float parser reads it: "10k" -> 10.
THRESHOLD_PATTERN = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def extract_number(value: Any) -> float | None:
    """Return the first number found in ``value``, or None.

    Only the first number of a multi-number cell is used ("10-20" -> 10).
    """
    if _is_number(value):
        return float(value)
    if value is None or value == "":
        return None
    match = NUMBER_PATTERN.search(str(value))
    return float(match.group(0)) if match else None


def parse_threshold(value: Any) -> float | None:
    """Parse a filter threshold, None when it does not start with a number."""
    if _is_number(value):
        number = float(value)
        return None if math.isnan(number) else number
    if value is None:
        return None
    match = THRESHOLD_PATTERN.match(str(value))
    return float(match.group(0)) if match else None
