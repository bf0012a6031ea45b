"""Modelos tipados para esquemas basales diarios y sus intervalos."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


@dataclass(frozen=True)
class BasalInterval:
    """One clock-time span with a constant rate (units per hour)."""

    start_time: str
    end_time: str
    units_per_hour: float
    id: int | None = None
    schedule_id: int | None = None


@dataclass(frozen=True)
class BasalSchedule:
    """Daily schedule header (date + cached total)."""

    id: int
    day: date
    total_units: float
    created_at: datetime | None = None


class MatchKind(Enum):
    """How a queried date was resolved to a stored schedule."""

    EXACT = "exact"
    PRIOR = "prior"
    EARLIEST = "earliest"


@dataclass(frozen=True)
class ScheduleLookup:
    """Result of a date lookup: schedule, its intervals and the match kind."""

    schedule: BasalSchedule
    intervals: tuple[BasalInterval, ...]
    match: MatchKind

    @property
    def is_exact(self) -> bool:
        return self.match is MatchKind.EXACT
