"""
Time and clock abstractions for deterministic result timestamps.

Every row written to the results CSV carries the time it was recorded. Code
that needs "now" asks a Clock for it instead of calling datetime.now()
directly, so tests can freeze time and assert exact CSV content.
"""

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """
    Abstract time source protocol.

    **Conceptual**: A Clock is any object that can answer "what time is it
    right now?". Consumers accept a Clock (constructor or function parameter)
    and call clock.now() whenever they need the current time. In production
    pass a RealClock; in tests pass a FrozenClock.

    **Example**:
        def append_row(path, ..., clock: Clock):
            recorded_at = format_iso_timestamp(clock.now())
    """

    def now(self) -> datetime:
        """Return the current time according to this clock (UTC, tz-aware)."""
        ...


class RealClock:
    """Clock that returns the actual current system time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """
    Clock that always returns a fixed timestamp.

    **Usage**:
        clock = FrozenClock(datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc))
        clock.now()  # always 2025-03-01T12:00:00+00:00
    """

    def __init__(self, fixed_now: datetime):
        """
        Args:
            fixed_now: The datetime to return on every call to now().
                       Should be timezone-aware (UTC recommended).
        """
        self._fixed_now = fixed_now

    def now(self) -> datetime:
        return self._fixed_now


def format_iso_timestamp(moment: datetime) -> str:
    """
    Render a datetime as an ISO 8601 UTC string with millisecond precision.

    **Format**: "YYYY-MM-DDTHH:MM:SS.mmmZ", the same shape JavaScript's
    Date.toISOString() produces, so result files written by earlier versions
    of the tool and by this one sort and parse identically.

    Naive datetimes are assumed to already be in UTC.

    Args:
        moment: Datetime to format.

    Returns:
        ISO 8601 string ending in "Z".

    Example:
        >>> format_iso_timestamp(datetime(2025, 3, 1, 12, 0, 5, 250000, tzinfo=timezone.utc))
        '2025-03-01T12:00:05.250Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)

    milliseconds = moment.microsecond // 1000
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{milliseconds:03d}Z"


def get_real_clock() -> Clock:
    """Factory for a RealClock (handy as a dataclass/default factory)."""
    return RealClock()


def get_frozen_clock(fixed_now: datetime) -> Clock:
    """Factory for a FrozenClock pinned to `fixed_now`."""
    return FrozenClock(fixed_now)
