"""Aritmética de horas de reloj (HH:MM) y minutos desde medianoche."""

from __future__ import annotations

import re

from basal_tool.errors import InvalidFormatError

MINUTES_PER_DAY = 24 * 60
MIDNIGHT = "00:00"

_COLON_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")
_DIGITS_RE = re.compile(r"^[0-9]{3,4}$")


def split_clock_time(text: str, *, field: str = "time") -> tuple[int, int]:
    """Parse a flexible clock time into (hour, minute).

    Accepted shapes: ``H:MM``, ``HH:MM``, ``HMM`` (e.g. ``"230"``) and
    ``HHMM`` (e.g. ``"0230"``). Surrounding whitespace is ignored.

    Raises:
        InvalidFormatError: If the shape is unknown or the value is out of range.
    """
    raw = text.strip()
    match = _COLON_RE.match(raw)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
    elif _DIGITS_RE.match(raw):
        split_at = len(raw) - 2
        hour, minute = int(raw[:split_at]), int(raw[split_at:])
    else:
        raise InvalidFormatError(
            f"invalid time format {text!r}: use HH:MM, H:MM, HMM or HHMM",
            field=field,
        )
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidFormatError(
            f"invalid time {text!r}: hours must be 0-23, minutes must be 0-59",
            field=field,
        )
    return hour, minute


def parse_clock_time(text: str, *, field: str = "time") -> str:
    """Return the canonical zero-padded ``HH:MM`` form of ``text``."""
    hour, minute = split_clock_time(text, field=field)
    return f"{hour:02d}:{minute:02d}"


def to_minutes(clock: str) -> int:
    """Minutes since midnight for a clock time, in [0, 1439]."""
    hour, minute = split_clock_time(clock)
    return hour * 60 + minute


def minutes_to_clock(minutes: int) -> str:
    """Inverse of :func:`to_minutes`; 1440 folds back to 00:00."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def interval_minutes(start: str, end: str) -> int:
    """Duration between two clock times, wrapping past midnight.

    An end at or before the start is read as the next day, so
    ``interval_minutes("18:00", "00:00") == 360``.
    """
    start_min = to_minutes(start)
    end_min = to_minutes(end)
    if end_min <= start_min:
        end_min += MINUTES_PER_DAY
    return end_min - start_min
