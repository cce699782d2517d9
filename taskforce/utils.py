"""Small numeric helpers shared by the assignment and scoring code."""

import math
from datetime import datetime, timezone
from typing import Union

Number = Union[int, float]


def clamp(value: Number, low: Number, high: Number) -> Number:
    """Bound value to the closed interval [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (28.5 -> 29, 12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
