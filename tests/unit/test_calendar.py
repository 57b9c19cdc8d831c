from datetime import date, datetime, timezone

import pytest

from app.core.calendar import (
    format_date_utc,
    local_calendar_date,
    local_midnight_utc,
    normalize_to_monday,
    parse_week_start_string,
    resolve_timezone,
    sunday_weekday,
    week_end,
)
from app.core.errors import InvalidDateError


def test_normalize_to_monday_mid_week() -> None:
    instant = datetime(2025, 2, 12, 15, 30, 12, tzinfo=timezone.utc)
    assert normalize_to_monday(instant) == datetime(2025, 2, 10, tzinfo=timezone.utc)


def test_normalize_to_monday_sunday_belongs_to_previous_monday() -> None:
    instant = datetime(2025, 2, 16, 23, 59, tzinfo=timezone.utc)
    assert normalize_to_monday(instant) == datetime(2025, 2, 10, tzinfo=timezone.utc)


def test_normalize_to_monday_is_idempotent_and_pure() -> None:
    instant = datetime(2025, 2, 13, 8, 0, tzinfo=timezone.utc)
    once = normalize_to_monday(instant)
    assert normalize_to_monday(once) == once
    assert instant == datetime(2025, 2, 13, 8, 0, tzinfo=timezone.utc)


def test_normalize_to_monday_treats_naive_as_utc() -> None:
    assert normalize_to_monday(datetime(2025, 2, 12, 1, 0)) == datetime(
        2025, 2, 10, tzinfo=timezone.utc
    )


def test_local_calendar_date_depends_on_timezone() -> None:
    # 2025-02-11 05:00 UTC is still Monday evening on the US west coast
    instant = datetime(2025, 2, 11, 5, 0, tzinfo=timezone.utc)
    assert local_calendar_date(instant, "America/Los_Angeles") == "2025-02-10"
    assert local_calendar_date(instant, "Asia/Tokyo") == "2025-02-11"


def test_local_calendar_date_unknown_zone_falls_back_to_default() -> None:
    instant = datetime(2025, 2, 11, 5, 0, tzinfo=timezone.utc)
    assert local_calendar_date(instant, "Mars/Olympus_Mons") == "2025-02-10"
    assert resolve_timezone(None).key == "America/Los_Angeles"


def test_parse_week_start_string_normalizes_to_monday() -> None:
    assert parse_week_start_string("2025-02-13") == datetime(2025, 2, 10, tzinfo=timezone.utc)
    assert parse_week_start_string("2025-02-10") == datetime(2025, 2, 10, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["2025-02-30", "not-a-date", "", "2025/02/10"])
def test_parse_week_start_string_rejects_invalid(value: str) -> None:
    with pytest.raises(InvalidDateError):
        parse_week_start_string(value)


def test_week_end_is_last_millisecond_of_sunday() -> None:
    end = week_end(datetime(2025, 2, 10, tzinfo=timezone.utc))
    assert end == datetime(2025, 2, 16, 23, 59, 59, 999000, tzinfo=timezone.utc)


def test_format_date_utc_converts_before_formatting() -> None:
    from zoneinfo import ZoneInfo

    late_evening = datetime(2025, 2, 10, 20, 0, tzinfo=ZoneInfo("America/Los_Angeles"))
    assert format_date_utc(late_evening) == "2025-02-11"
    assert format_date_utc(date(2025, 2, 10)) == "2025-02-10"


def test_sunday_weekday_indices() -> None:
    assert sunday_weekday(date(2025, 2, 9)) == 0  # Sunday
    assert sunday_weekday(date(2025, 2, 10)) == 1  # Monday
    assert sunday_weekday(date(2025, 2, 15)) == 6  # Saturday


def test_local_midnight_utc_follows_dst() -> None:
    # DST starts in Los Angeles on 2025-03-09
    assert local_midnight_utc(date(2025, 3, 9), "America/Los_Angeles") == datetime(
        2025, 3, 9, 8, 0, tzinfo=timezone.utc
    )
    assert local_midnight_utc(date(2025, 3, 10), "America/Los_Angeles") == datetime(
        2025, 3, 10, 7, 0, tzinfo=timezone.utc
    )


@pytest.mark.parametrize(
    "instant",
    [
        datetime(2025, 3, 9, 10, 0, tzinfo=timezone.utc),
        datetime(2024, 12, 31, 23, 59, tzinfo=timezone.utc),
        datetime(2025, 2, 16, 0, 0, tzinfo=timezone.utc),
    ],
)
def test_week_start_string_round_trips(instant: datetime) -> None:
    monday = normalize_to_monday(instant)
    assert parse_week_start_string(format_date_utc(monday)) == monday


def test_local_calendar_date_across_dst_end() -> None:
    # DST ends in Los Angeles on 2025-11-02 at 09:00 UTC
    la = "America/Los_Angeles"
    assert local_calendar_date(datetime(2025, 11, 2, 6, 30, tzinfo=timezone.utc), la) == "2025-11-01"
    assert local_calendar_date(datetime(2025, 11, 2, 7, 30, tzinfo=timezone.utc), la) == "2025-11-02"
    # Standard time: local midnight is now 08:00 UTC
    assert local_calendar_date(datetime(2025, 11, 3, 7, 30, tzinfo=timezone.utc), la) == "2025-11-02"
    assert local_calendar_date(datetime(2025, 11, 3, 8, 30, tzinfo=timezone.utc), la) == "2025-11-03"
