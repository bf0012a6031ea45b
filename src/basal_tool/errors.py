"""Errores del dominio: validación de intervalos, búsquedas y persistencia."""

from __future__ import annotations


class BasalError(Exception):
    """Base class for every error raised by basal_tool."""


class ValidationError(BasalError, ValueError):
    """A proposed interval (or set of intervals) violates a constraint.

    Attributes:
        field: Name of the offending field ("start_time", "units_per_hour"...).
        index: Position of the offending interval in entry order, if any.
    """

    def __init__(self, message: str, *, field: str, index: int | None = None) -> None:
        super().__init__(message)
        self.field = field
        self.index = index


class InvalidFormatError(ValidationError):
    """Clock time text does not match H:MM, HH:MM, HMM or HHMM."""


class DiscontinuousIntervalError(ValidationError):
    """Interval start does not match the previous interval end."""


class MissingDayStartError(ValidationError):
    """First interval does not start at 00:00."""


class NonIncreasingIntervalError(ValidationError):
    """Interval end is not later than its start (and is not 00:00)."""


class IncompleteDayCoverageError(ValidationError):
    """No interval ends at 00:00, so the day is not fully covered."""


class InvalidRateError(ValidationError):
    """Rate is not a non-negative real number."""


class NoRecordsExistError(BasalError, LookupError):
    """The store holds no schedules at all."""


class RecordNotFoundError(BasalError, LookupError):
    """No schedule exists with the given id."""

    def __init__(self, schedule_id: int) -> None:
        super().__init__(f"record with ID {schedule_id} not found")
        self.schedule_id = schedule_id


class StorageFailureError(BasalError):
    """Underlying SQLite error; the transaction in flight was rolled back."""
