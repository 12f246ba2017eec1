"""Date parsing and the business-day clock."""
from datetime import date, datetime, timezone

import pytz

from fleet.exceptions import InvalidDateRangeError
from fleet.utils.constants import DATE_FMT

DEFAULT_TIMEZONE = "Europe/Amsterdam"


def parse_date(value, field: str = "date") -> date:
    """
    Coerce a date-like value to a naive date.
    Supports date/datetime objects, 'YYYY-MM-DD' and ISO strings with a 'T' part.
    Raises InvalidDateRangeError on anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        base = value.split("T", 1)[0].strip()
        try:
            return datetime.strptime(base, DATE_FMT).date()
        except ValueError:
            pass
    raise InvalidDateRangeError(f"Error: invalid {field} {value!r} (expected YYYY-MM-DD)")


def parse_optional_date(value, field: str = "date") -> date | None:
    """Like parse_date, but None/'' mean 'no date' (open-ended)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_date(value, field)


def to_iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def today(tz_name: str | None = None) -> date:
    """
    Today's date in the business timezone.
    Falls back to DEFAULT_TIMEZONE when no zone is given; wrap for mocking in tests.
    """
    tz = pytz.timezone(tz_name or DEFAULT_TIMEZONE)
    return datetime.now(timezone.utc).astimezone(tz).date()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
