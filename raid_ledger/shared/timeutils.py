"""UTC helpers - all timestamps are stored as naive UTC datetimes"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a naive UTC datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values are assumed to be UTC already"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    """Render a naive UTC datetime as ISO-8601 with millisecond precision and a Z suffix"""
    if value is None:
        return None
    value = to_naive_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def current_week_start(now: Optional[datetime] = None) -> datetime:
    """Most recent Sunday 00:00 UTC (the grid's week starts on Sunday)"""
    now = now or utc_now()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    # weekday(): Monday=0 ... Sunday=6
    days_since_sunday = (midnight.weekday() + 1) % 7
    return midnight - timedelta(days=days_since_sunday)
