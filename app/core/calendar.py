# app/core/calendar.py
"""
Calendar helpers shared by the scheduling code.

Conventions:
  - Instants are timezone-aware UTC datetimes. Naive datetimes (what
    SQLite hands back) are treated as UTC.
  - Local calendar dates are "YYYY-MM-DD" strings or `date` objects.
  - Weekday indices follow 0=Sunday .. 6=Saturday.
"""
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import get_settings
from app.core.errors import InvalidDateError

DATE_FORMAT = "%Y-%m-%d"


def ensure_utc(instant: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def is_valid_timezone(name: str | None) -> bool:
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def resolve_timezone(name: str | ZoneInfo | None) -> ZoneInfo:
    """
    Return a ZoneInfo for `name`.

    Falls back to DEFAULT_TIMEZONE when the name is empty or unknown, so
    every user has a usable zone even if their profile is incomplete.
    """
    if isinstance(name, ZoneInfo):
        return name
    if is_valid_timezone(name):
        return ZoneInfo(name)  # type: ignore[arg-type]
    return ZoneInfo(get_settings().DEFAULT_TIMEZONE)


def normalize_to_monday(instant: datetime) -> datetime:
    """
    Round an instant down to 00:00:00.000 UTC on the Monday of its UTC week.

    Returns a new datetime; the argument is never modified.
    """
    utc_instant = ensure_utc(instant)
    monday = utc_instant.date() - timedelta(days=utc_instant.weekday())
    return datetime.combine(monday, time.min, tzinfo=timezone.utc)


def local_date(instant: datetime, tz: str | ZoneInfo | None) -> date:
    """Calendar date of `instant` as seen in `tz` (DST-aware)."""
    return ensure_utc(instant).astimezone(resolve_timezone(tz)).date()


def local_calendar_date(instant: datetime, tz: str | ZoneInfo | None) -> str:
    """Same as `local_date` but formatted as "YYYY-MM-DD"."""
    return local_date(instant, tz).strftime(DATE_FORMAT)


def parse_local_date(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise InvalidDateError(f"Invalid date string: {value}")


def parse_week_start_string(value: str) -> datetime:
    """
    Parse "YYYY-MM-DD" as UTC midnight and normalize to that week's Monday.

    Raises:
        InvalidDateError: if the string is not a valid calendar date.
    """
    parsed = parse_local_date(value)
    return normalize_to_monday(datetime.combine(parsed, time.min, tzinfo=timezone.utc))


def format_date_utc(value: datetime | date) -> str:
    """Format as "YYYY-MM-DD"; datetimes are converted to UTC first."""
    if isinstance(value, datetime):
        value = ensure_utc(value).date()
    return value.strftime(DATE_FORMAT)


def week_end(monday: datetime) -> datetime:
    """Sunday 23:59:59.999 UTC of the week starting at `monday`."""
    return ensure_utc(monday) + timedelta(
        days=6, hours=23, minutes=59, seconds=59, milliseconds=999
    )


def sunday_weekday(value: date) -> int:
    """Weekday index with Sunday=0 .. Saturday=6."""
    return (value.weekday() + 1) % 7


def local_midnight_utc(value: date, tz: str | ZoneInfo | None) -> datetime:
    """UTC instant of 00:00 local time on `value` in `tz`."""
    local = datetime.combine(value, time.min, tzinfo=resolve_timezone(tz))
    return local.astimezone(timezone.utc)
