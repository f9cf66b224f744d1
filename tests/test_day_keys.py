"""Day-key formatting and parsing."""

from datetime import date, datetime, timedelta, timezone

import pytest

from tools.day_keys import day_key, format_display_date, is_day_key, local_date, parse_day_key


def test_day_key_zero_pads_components() -> None:
    assert day_key(date(2025, 1, 5)) == "2025-01-05"
    assert day_key(date(987, 12, 31)) == "0987-12-31"
    assert day_key(datetime(2025, 11, 30, 23, 59)) == "2025-11-30"


def test_aware_datetimes_use_the_local_calendar() -> None:
    moment = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert day_key(moment) == day_key(moment.astimezone().date())
    assert local_date(moment) == moment.astimezone().date()


def test_parse_is_inverse_of_format() -> None:
    start = date(2023, 12, 25)
    for offset in range(0, 800, 7):
        day = start + timedelta(days=offset)
        assert parse_day_key(day_key(day)) == day
    assert parse_day_key(day_key(date(2024, 2, 29))) == date(2024, 2, 29)


@pytest.mark.parametrize("raw", ["2025-1-05", "2025/01/05", "25-01-05", "2025-02-30", "2025-13-01", "", "2025-01-05 "])
def test_parse_rejects_malformed_keys(raw: str) -> None:
    assert parse_day_key(raw) is None
    assert not is_day_key(raw)


def test_display_format() -> None:
    assert format_display_date(date(2025, 3, 7)) == "07.03.2025"
