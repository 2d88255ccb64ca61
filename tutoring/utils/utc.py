from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from ..settings import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcfromtimestamp(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, timezone.utc)


def platform_zone() -> tzinfo:
    return ZoneInfo(settings.timezone)


def day_of_week(dt: datetime) -> int:
    """Weekday of a date with 0 = Sunday, 6 = Saturday"""

    return dt.isoweekday() % 7
