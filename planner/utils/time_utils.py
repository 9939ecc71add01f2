"""Duration and day-bucketing helpers

All functions here are pure. Timestamps are compared as wall-clock instants;
durations are never accumulated from ticks.
"""
import math
from datetime import datetime, date, timedelta, timezone, tzinfo
from typing import List, Optional, Union
from planner.errors import InvalidDurationError


class SystemClock:
    """Clock backed by the system time"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives"""
    return int(math.floor(value + 0.5))


def compute_duration(start: datetime, end: datetime) -> int:
    """Whole seconds between two timestamps.

    Raises InvalidDurationError when end precedes start rather than clamping,
    so a backwards clock never feeds a negative value into aggregates.
    """
    seconds = (end - start).total_seconds()
    if seconds < 0:
        raise InvalidDurationError(start, end)
    return round_half_up(seconds)


def to_local(timestamp: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an aware timestamp to local time; naive timestamps are already local"""
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone(tz)


def start_of_day(timestamp: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Local midnight of the day containing timestamp"""
    return to_local(timestamp, tz).replace(hour=0, minute=0, second=0, microsecond=0)


def day_bucket_key(timestamp: datetime, tz: Optional[tzinfo] = None) -> str:
    """YYYY-MM-DD of the local calendar day containing timestamp"""
    return to_local(timestamp, tz).date().isoformat()


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def enumerate_days(start_date: Union[date, datetime], end_date: Union[date, datetime]) -> List[str]:
    """Ascending YYYY-MM-DD strings from start_date through end_date inclusive"""
    first = _as_date(start_date)
    last = _as_date(end_date)
    count = (last - first).days + 1
    return [(first + timedelta(days=offset)).isoformat() for offset in range(max(count, 0))]
