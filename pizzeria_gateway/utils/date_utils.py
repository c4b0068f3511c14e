"""Date and time-of-day utilities"""

import re
from datetime import datetime
from zoneinfo import ZoneInfo

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def local_now(timezone_name: str) -> datetime:
    """Current wall-clock time in the store's timezone"""
    return datetime.now(ZoneInfo(timezone_name))


def weekday_sunday_first(moment: datetime) -> int:
    """Weekday with 0=Sunday .. 6=Saturday"""
    return moment.isoweekday() % 7


def seconds_since_midnight(moment: datetime) -> int:
    return moment.hour * 3600 + moment.minute * 60 + moment.second


def parse_time(value: str) -> int | None:
    """
    Parse "HH:MM" or "HH:MM:SS" into seconds since midnight.

    Returns None for anything unparseable or out of range.
    """
    match = _TIME_PATTERN.match(str(value).strip())
    if not match:
        return None

    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return hours * 3600 + minutes * 60 + seconds
