from __future__ import annotations

import pytest

from basal_tool.errors import InvalidFormatError
from basal_tool.timeutil import (
    interval_minutes,
    minutes_to_clock,
    parse_clock_time,
    split_clock_time,
    to_minutes,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("0:00", "00:00"),
        ("6:30", "06:30"),
        ("18:05", "18:05"),
        ("230", "02:30"),
        ("0230", "02:30"),
        ("2359", "23:59"),
        ("  7:15 ", "07:15"),
    ],
)
def test_parse_clock_time_accepted_shapes(raw: str, expected: str) -> None:
    assert parse_clock_time(raw) == expected


@pytest.mark.parametrize("raw", ["25:00", "abc", "99", "12:60", "2460", "", "1:5", "12345"])
def test_parse_clock_time_rejects_malformed(raw: str) -> None:
    with pytest.raises(InvalidFormatError):
        parse_clock_time(raw)


def test_invalid_format_carries_field() -> None:
    with pytest.raises(InvalidFormatError) as info:
        parse_clock_time("abc", field="end_time")
    assert info.value.field == "end_time"


def test_split_clock_time_tuple() -> None:
    assert split_clock_time("945") == (9, 45)


def test_to_minutes_bounds() -> None:
    assert to_minutes("00:00") == 0
    assert to_minutes("23:59") == 1439
    assert to_minutes("06:00") == 360


def test_minutes_to_clock_folds_midnight() -> None:
    assert minutes_to_clock(0) == "00:00"
    assert minutes_to_clock(1439) == "23:59"
    assert minutes_to_clock(1440) == "00:00"


def test_interval_minutes_wraps_past_midnight() -> None:
    assert interval_minutes("06:00", "18:00") == 720
    assert interval_minutes("18:00", "00:00") == 360
    assert interval_minutes("00:00", "00:00") == 1440


@pytest.mark.parametrize("raw", ["０６００", "٠٦:٠٠", "6:３0"])
def test_parse_clock_time_rejects_non_ascii_digits(raw: str) -> None:
    with pytest.raises(InvalidFormatError):
        parse_clock_time(raw)
