"""Nursery-local clock and time formatting."""
from datetime import date, datetime, time
from functools import lru_cache
from zoneinfo import ZoneInfo

from nursery.config import settings


@lru_cache
def nursery_tz() -> ZoneInfo:
    return ZoneInfo(settings.nursery_timezone)


def local_now() -> datetime:
    return datetime.now(nursery_tz())


def local_today() -> date:
    return local_now().date()


def clock_time(moment: datetime) -> time:
    """Wall-clock minute of `moment`; seconds are dropped so 10:00:59 is still 10:00."""
    return moment.time().replace(second=0, microsecond=0)


def format_clock(moment: datetime | time) -> str:
    """Stored form: zero-padded 24-hour HH:MM."""
    return moment.strftime("%H:%M")


def format_display_time(value: str | None) -> str:
    """12-hour rendering of a stored HH:MM value, e.g. '01:05 PM'."""
    if not value:
        return ""
    return time.fromisoformat(value).strftime("%I:%M %p")
