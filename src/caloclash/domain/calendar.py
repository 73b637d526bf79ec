"""Calendar-day helpers.

A day is an integer count of days since 1970-01-01 in local wall time, so
day arithmetic is plain integer subtraction.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

EPOCH = date(1970, 1, 1)

_LEGACY_FORMAT = "%a %b %d %Y"


def day_from_date(value: date) -> int:
    """Return the day number for a calendar date."""
    return (value - EPOCH).days


def day_to_date(day: int) -> date:
    """Return the calendar date for a day number."""
    return date.fromordinal(EPOCH.toordinal() + day)


def local_today(timezone_name: str | None = None) -> int:
    """Return today's day number in local time or in the given timezone."""
    if timezone_name:
        return day_from_date(datetime.now(tz=ZoneInfo(timezone_name)).date())
    return day_from_date(date.today())


def format_day(day: int) -> str:
    """Format a day number as an ISO date string."""
    return day_to_date(day).isoformat()


def parse_day(raw: object) -> int | None:
    """Parse a stored date string into a day number.

    Accepts ISO dates, ISO timestamps and the legacy ``Mon Oct 19 2026``
    form. Returns None for anything else.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    try:
        return day_from_date(date.fromisoformat(text))
    except ValueError:
        pass
    try:
        return day_from_date(datetime.strptime(text, _LEGACY_FORMAT).date())
    except ValueError:
        pass
    try:
        return day_from_date(datetime.fromisoformat(text).date())
    except ValueError:
        return None
