# app/core/periods.py
"""
Check-in period resolution.

A period starts on the most recent scheduled weekday on or before the
subject's local "today" and ends on the next scheduled weekday after
that start. Consecutive periods share a boundary day: the end of one
period is the start of the next, so membership is half-open
[period_start, period_end).
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from app.core.calendar import (
    local_date,
    local_midnight_utc,
    sunday_weekday,
)

MONDAY = 1
DEFAULT_SCHEDULE_DAYS: frozenset[int] = frozenset({MONDAY})


@dataclass(frozen=True)
class Period:
    period_start: date
    period_end: date
    scheduled_weekdays: frozenset[int]
    label: str

    def contains(self, value: date) -> bool:
        return self.period_start <= value < self.period_end

    def utc_bounds(self, tz: str | ZoneInfo | None) -> tuple[datetime, datetime]:
        """Local midnights of start/end expressed as UTC instants."""
        return (
            local_midnight_utc(self.period_start, tz),
            local_midnight_utc(self.period_end, tz),
        )

    @property
    def length_days(self) -> int:
        return (self.period_end - self.period_start).days


@dataclass(frozen=True)
class WindowStatus:
    checked_in_today: bool
    has_check_in_in_period: bool
    due_today: bool
    overdue: bool


def effective_schedule_days(
    coach_default_days: Iterable[int] | None,
    client_override_days: Iterable[int] | None,
) -> set[int]:
    """
    Resolve which weekdays a client checks in on.

    Client override (non-empty) wins over the coach default; if both are
    empty every client still gets a Monday cadence.
    """
    override = set(client_override_days or ())
    if override:
        return override
    coach_days = set(coach_default_days or ())
    if coach_days:
        return coach_days
    return set(DEFAULT_SCHEDULE_DAYS)


def format_period_label(start: date, end: date) -> str:
    """e.g. "Feb 10 – Feb 17"."""
    return f"{start:%b} {start.day} – {end:%b} {end.day}"


def compute_current_period(
    scheduled_weekdays: Iterable[int],
    instant: datetime,
    tz: str | ZoneInfo | None,
) -> Period:
    days = frozenset(d % 7 for d in scheduled_weekdays) or DEFAULT_SCHEDULE_DAYS

    today = local_date(instant, tz)
    local_weekday = sunday_weekday(today)

    start_offset = 0
    for offset in range(7):
        if (local_weekday - offset) % 7 in days:
            start_offset = offset
            break
    period_start = today - timedelta(days=start_offset)

    start_weekday = sunday_weekday(period_start)
    end_offset = 7
    for offset in range(1, 8):
        if (start_weekday + offset) % 7 in days:
            end_offset = offset
            break
    period_end = period_start + timedelta(days=end_offset)

    return Period(
        period_start=period_start,
        period_end=period_end,
        scheduled_weekdays=days,
        label=format_period_label(period_start, period_end),
    )


def check_in_window_status(
    period: Period,
    today: date,
    check_in_dates: Iterable[date],
) -> WindowStatus:
    """
    Derive due/overdue flags for a client.

      - due_today: today is a scheduled day and nothing was submitted today
      - overdue:   the period started before today and has no check-in yet
    """
    dates = set(check_in_dates)
    checked_in_today = today in dates
    has_in_period = any(period.contains(d) for d in dates)
    due_today = sunday_weekday(today) in period.scheduled_weekdays and not checked_in_today
    overdue = not has_in_period and today > period.period_start
    return WindowStatus(
        checked_in_today=checked_in_today,
        has_check_in_in_period=has_in_period,
        due_today=due_today,
        overdue=overdue,
    )
