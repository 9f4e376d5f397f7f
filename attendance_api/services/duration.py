"""Worked-hours derivation for attendance records."""
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

_SECONDS_PER_HOUR = Decimal(3600)
_TWO_PLACES = Decimal("0.01")


def elapsed(start: datetime, end: datetime) -> timedelta:
    """Real time between two moments, also across a DST change in one zone."""
    if start.tzinfo is not None and end.tzinfo is not None:
        return end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return end - start


def compute_total_hours(clock_in: Optional[datetime], clock_out: Optional[datetime]) -> float:
    """Hours between clock-in and clock-out rounded half-up to 2 decimals.

    Returns 0 while the session is open. The interval is wall clock time, so
    a gap left by a reopened session is counted. Negative intervals are
    returned as is; callers that accept edited timestamps reject them first.
    """
    if clock_in is None or clock_out is None:
        return 0.0
    seconds = Decimal(str(elapsed(clock_in, clock_out).total_seconds()))
    return float((seconds / _SECONDS_PER_HOUR).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
