from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from basal_tool.errors import (
    DiscontinuousIntervalError,
    IncompleteDayCoverageError,
    InvalidFormatError,
    InvalidRateError,
    MissingDayStartError,
    NonIncreasingIntervalError,
    ValidationError,
)
from basal_tool.model import BasalInterval
from basal_tool.timeutil import minutes_to_clock, to_minutes
from basal_tool.validation import IntervalBuilder, parse_rate, validate_intervals


def _iv(start: str, end: str, rate: float) -> BasalInterval:
    return BasalInterval(start_time=start, end_time=end, units_per_hour=rate)


def _partition(cuts: list[int], rates: list[float]) -> list[BasalInterval]:
    bounds = [0, *sorted(set(cuts)), 1440]
    return [
        _iv(minutes_to_clock(a), minutes_to_clock(b), rates[i % len(rates)])
        for i, (a, b) in enumerate(zip(bounds, bounds[1:]))
    ]


_cuts = st.lists(st.integers(min_value=1, max_value=1439), max_size=12)
_rates = st.lists(
    st.floats(min_value=0, max_value=10, allow_nan=False), min_size=1, max_size=5
)


@given(_cuts, _rates)
def test_continuous_partitions_always_validate(cuts: list[int], rates: list[float]) -> None:
    intervals = _partition(cuts, rates)
    out = validate_intervals(intervals)
    assert out[0].start_time == "00:00"
    assert out[-1].end_time == "00:00"
    for prev, nxt in zip(out, out[1:]):
        assert to_minutes(prev.end_time) == to_minutes(nxt.start_time)


@given(
    st.lists(st.integers(min_value=1, max_value=1439), min_size=2, max_size=12),
    st.data(),
)
def test_injected_gap_or_overlap_is_rejected(cuts: list[int], data: st.DataObject) -> None:
    intervals = _partition(cuts, [1.0])
    k = data.draw(st.integers(min_value=1, max_value=len(intervals) - 1))
    target = intervals[k]
    shift = data.draw(st.sampled_from([-1, 1]))
    moved = minutes_to_clock(to_minutes(target.start_time) + shift)
    intervals[k] = _iv(moved, target.end_time, target.units_per_hour)
    with pytest.raises(ValidationError):
        validate_intervals(intervals)


@given(st.lists(st.integers(min_value=1, max_value=1439), min_size=2, max_size=12))
def test_out_of_order_entry_is_rejected(cuts: list[int]) -> None:
    intervals = _partition(cuts, [1.0])
    swapped = [intervals[0], *reversed(intervals[1:])]
    if swapped == intervals:
        return
    with pytest.raises(DiscontinuousIntervalError):
        validate_intervals(swapped)


def test_first_interval_must_start_at_midnight() -> None:
    builder = IntervalBuilder()
    with pytest.raises(MissingDayStartError) as info:
        builder.accept("01:00", "06:00", 0.8)
    assert info.value.field == "start_time"
    assert info.value.index == 0
    assert builder.intervals == ()


def test_start_must_match_previous_end() -> None:
    builder = IntervalBuilder()
    builder.accept("0000", "0600", "0.8")
    with pytest.raises(DiscontinuousIntervalError, match="06:00"):
        builder.accept("07:00", "12:00", 1.0)
    assert builder.next_start == "06:00"
    assert len(builder.intervals) == 1


def test_end_must_be_after_start_unless_midnight() -> None:
    builder = IntervalBuilder()
    builder.accept("00:00", "06:00", 0.8)
    with pytest.raises(NonIncreasingIntervalError):
        builder.accept("06:00", "05:00", 1.0)
    with pytest.raises(NonIncreasingIntervalError):
        builder.accept("06:00", "06:00", 1.0)
    builder.accept("06:00", "00:00", 1.0)
    assert builder.is_complete


def test_nothing_can_follow_midnight_end() -> None:
    builder = IntervalBuilder()
    builder.accept("00:00", "00:00", 0.5)
    with pytest.raises(DiscontinuousIntervalError):
        builder.accept("00:00", "06:00", 0.5)


def test_build_refuses_incomplete_day() -> None:
    builder = IntervalBuilder()
    with pytest.raises(IncompleteDayCoverageError):
        builder.build()
    builder.accept("00:00", "12:00", 1.0)
    assert not builder.is_complete
    with pytest.raises(IncompleteDayCoverageError, match="00:00"):
        builder.build()


def test_accept_normalizes_times_and_rate() -> None:
    builder = IntervalBuilder()
    interval = builder.accept("0:00", "630", " 1.25 ")
    assert interval == _iv("00:00", "06:30", 1.25)


def test_bad_time_reports_field() -> None:
    builder = IntervalBuilder()
    with pytest.raises(InvalidFormatError) as info:
        builder.accept("00:00", "25:00", 1.0)
    assert info.value.field == "end_time"


@pytest.mark.parametrize("raw", ["-0.1", "abc", "", "nan", "inf", None, True])
def test_parse_rate_rejects(raw: object) -> None:
    with pytest.raises(InvalidRateError) as info:
        parse_rate(raw)
    assert info.value.field == "units_per_hour"


def test_parse_rate_accepts_zero_and_numbers() -> None:
    assert parse_rate("0") == 0.0
    assert parse_rate(1) == 1.0
    assert parse_rate("0.85") == 0.85


def test_validate_intervals_example_day() -> None:
    out = validate_intervals(
        [_iv("0:00", "6:00", 0.8), _iv("6:00", "1800", 1.0), _iv("18:00", "0000", 0.9)]
    )
    assert [(iv.start_time, iv.end_time) for iv in out] == [
        ("00:00", "06:00"),
        ("06:00", "18:00"),
        ("18:00", "00:00"),
    ]
