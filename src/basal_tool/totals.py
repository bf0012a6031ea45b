"""Cálculo del total diario de insulina basal y perfil horario."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from basal_tool.model import BasalInterval
from basal_tool.timeutil import MINUTES_PER_DAY, interval_minutes, to_minutes


def daily_total(intervals: Sequence[BasalInterval]) -> float:
    """Sum duration (hours) x rate across intervals.

    Intervals whose end is at or before their start wrap past midnight.
    """
    total = 0.0
    for interval in intervals:
        hours = interval_minutes(interval.start_time, interval.end_time) / 60.0
        total += hours * interval.units_per_hour
    return total


def minute_rates(intervals: Sequence[BasalInterval]) -> pd.Series:
    """Rate in effect for each minute of the day (index 0..1439)."""
    rates = pd.Series(0.0, index=pd.RangeIndex(MINUTES_PER_DAY), name="units_per_hour")
    for interval in intervals:
        start = to_minutes(interval.start_time)
        span = interval_minutes(interval.start_time, interval.end_time)
        end = min(start + span, MINUTES_PER_DAY)
        rates.iloc[start:end] = interval.units_per_hour
    return rates


def rate_profile(intervals: Sequence[BasalInterval]) -> pd.DataFrame:
    """Hourly profile: average rate in effect during each clock hour.

    Returns DataFrame columns:
        hour ("00:00".."23:00"), units_per_hour
    """
    per_minute = minute_rates(intervals)
    hourly = per_minute.groupby(per_minute.index // 60).mean()
    return pd.DataFrame(
        {
            "hour": [f"{h:02d}:00" for h in hourly.index],
            "units_per_hour": hourly.round(3).to_numpy(),
        }
    )
