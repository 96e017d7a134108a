"""
Utility functions for the Pathwise application.
"""

import math
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pathwise.constants import PERCENTAGE_ROUND_PRECISION


def new_id() -> str:
    """Generate a fresh opaque node id."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round a number half away from zero.

    Python's built-in round() uses banker's rounding (round(50.5) == 50),
    which disagrees with how percentages are shown to users.

    Args:
        value: Number to round.
        ndigits: Decimal places to keep.

    Returns:
        The rounded value as a float.

    Examples:
        >>> round_half_up(50.5)
        51.0
        >>> round_half_up(33.345, 2)
        33.35
    """
    if math.isnan(value) or math.isinf(value):
        return value
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_percentage(progress: float, precision: Optional[int] = None) -> str:
    """
    Format a progress value for display.

    Args:
        progress: Stored progress value (unrounded).
        precision: Decimal places. Defaults to PERCENTAGE_ROUND_PRECISION.

    Returns:
        A string such as "67%" or "66.7%".
    """
    if precision is None:
        precision = PERCENTAGE_ROUND_PRECISION
    rounded = round_half_up(progress, precision)
    if precision <= 0:
        return f"{int(rounded)}%"
    return f"{rounded:.{precision}f}%"

