"""Fixed-offset time helpers.

All reservation instants are built from a calendar date plus a time of day at
the configured offset (``+09:00`` by default) and compared as aware datetimes.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from roombook import config

LOCAL_TZ = timezone(timedelta(hours=config.UTC_OFFSET_HOURS))


def combine(day: date, time_of_day: time) -> datetime:
    """Return the instant of *time_of_day* on *day* at the fixed offset."""
    return datetime.combine(day, time_of_day.replace(tzinfo=None), tzinfo=LOCAL_TZ)


def to_iso(day: date, time_of_day: time) -> str:
    """Format like ``2024-01-01T09:00:00+09:00``."""
    return combine(day, time_of_day).isoformat()


def local(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(LOCAL_TZ)


def local_date(dt: datetime) -> date:
    return local(dt).date()


def local_time(dt: datetime) -> time:
    return local(dt).time().replace(second=0, microsecond=0)


def minutes_of(time_of_day: time) -> int:
    return time_of_day.hour * 60 + time_of_day.minute


def from_minutes(total: int) -> time:
    return time(total // 60, total % 60)


def fmt(time_of_day: time) -> str:
    return time_of_day.strftime("%H:%M")


def now() -> datetime:
    return datetime.now(LOCAL_TZ)
