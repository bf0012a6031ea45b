"""Validación de intervalos: partición continua de las 24 horas del día."""

from __future__ import annotations

import math
from collections.abc import Iterable

from basal_tool.errors import (
    DiscontinuousIntervalError,
    IncompleteDayCoverageError,
    InvalidRateError,
    MissingDayStartError,
    NonIncreasingIntervalError,
)
from basal_tool.model import BasalInterval
from basal_tool.timeutil import MIDNIGHT, parse_clock_time, to_minutes


def parse_rate(raw: object, *, index: int | None = None) -> float:
    """Parse a rate field into a non-negative finite float.

    Raises:
        InvalidRateError: If the value is not a number or is negative.
    """
    if isinstance(raw, bool):
        raise InvalidRateError(
            f"invalid units value {raw!r}", field="units_per_hour", index=index
        )
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidRateError(
            f"invalid units value {raw!r}", field="units_per_hour", index=index
        ) from None
    if not math.isfinite(value) or value < 0:
        raise InvalidRateError(
            f"units per hour must be a non-negative number, got {raw!r}",
            field="units_per_hour",
            index=index,
        )
    return value


class IntervalBuilder:
    """Accept intervals one at a time, in entry order, checking continuity.

    The builder never holds an invalid state: a rejected interval raises and
    leaves the accepted ones untouched, so the caller can re-prompt.
    """

    def __init__(self) -> None:
        self._intervals: list[BasalInterval] = []

    @property
    def intervals(self) -> tuple[BasalInterval, ...]:
        return tuple(self._intervals)

    @property
    def is_complete(self) -> bool:
        """True once some interval runs to midnight."""
        return bool(self._intervals) and self._intervals[-1].end_time == MIDNIGHT

    @property
    def next_start(self) -> str:
        """Start time the next interval must use."""
        if not self._intervals:
            return MIDNIGHT
        return self._intervals[-1].end_time

    def accept(self, start: str, end: str, rate: object) -> BasalInterval:
        """Validate and append the next interval.

        Args:
            start: Start time in any accepted clock format.
            end: End time in any accepted clock format; ``00:00`` closes the day.
            rate: Units per hour (number or numeric text).

        Returns:
            The canonical interval that was appended.
        """
        index = len(self._intervals)
        start_time = parse_clock_time(start, field="start_time")
        end_time = parse_clock_time(end, field="end_time")
        units = parse_rate(rate, index=index)

        if index == 0:
            if start_time != MIDNIGHT:
                raise MissingDayStartError(
                    f"first interval must start at 00:00, got {start_time}",
                    field="start_time",
                    index=index,
                )
        elif self.is_complete:
            raise DiscontinuousIntervalError(
                "day already covered: previous interval ends at 00:00",
                field="start_time",
                index=index,
            )
        elif start_time != self.next_start:
            raise DiscontinuousIntervalError(
                f"start time must match previous end time ({self.next_start})",
                field="start_time",
                index=index,
            )

        if end_time != MIDNIGHT and to_minutes(end_time) <= to_minutes(start_time):
            raise NonIncreasingIntervalError(
                f"end time must be after start time ({start_time})",
                field="end_time",
                index=index,
            )

        interval = BasalInterval(
            start_time=start_time, end_time=end_time, units_per_hour=units
        )
        self._intervals.append(interval)
        return interval

    def build(self) -> tuple[BasalInterval, ...]:
        """Return the validated intervals, refusing an incomplete day."""
        if not self._intervals:
            raise IncompleteDayCoverageError(
                "no intervals provided", field="intervals"
            )
        if not self.is_complete:
            raise IncompleteDayCoverageError(
                f"last interval must end at 00:00, got {self._intervals[-1].end_time}",
                field="intervals",
                index=len(self._intervals) - 1,
            )
        return self.intervals


def validate_intervals(intervals: Iterable[BasalInterval]) -> tuple[BasalInterval, ...]:
    """Validate a fully assembled interval list.

    Returns:
        Canonical copies of the intervals (zero-padded times, float rates).
    """
    builder = IntervalBuilder()
    for interval in intervals:
        builder.accept(interval.start_time, interval.end_time, interval.units_per_hour)
    return builder.build()
