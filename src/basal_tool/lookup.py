"""Resolución de fecha: exacta, anterior más cercana o la más antigua."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date

from basal_tool.errors import NoRecordsExistError
from basal_tool.model import MatchKind

logger = logging.getLogger(__name__)

# Same-date duplicates: the latest inserted row (highest id) wins.
_STEPS: tuple[tuple[MatchKind, str], ...] = (
    (
        MatchKind.EXACT,
        """
        SELECT id FROM basal_schedules
        WHERE date = :day
        ORDER BY id DESC LIMIT 1
        """,
    ),
    (
        MatchKind.PRIOR,
        """
        SELECT id FROM basal_schedules
        WHERE date <= :day
        ORDER BY date DESC, id DESC LIMIT 1
        """,
    ),
    (
        MatchKind.EARLIEST,
        """
        SELECT id FROM basal_schedules
        ORDER BY date ASC, id DESC LIMIT 1
        """,
    ),
)


def resolve_schedule_id(conn: sqlite3.Connection, day: date) -> tuple[int, MatchKind]:
    """Pick the schedule that answers a query for ``day``.

    Args:
        conn: Open connection on the basal database.
        day: Target calendar date.

    Returns:
        Tuple of (schedule id, how it matched).

    Raises:
        NoRecordsExistError: If there are no schedules at all.
    """
    params = {"day": day.isoformat()}
    for kind, sql in _STEPS:
        row = conn.execute(sql, params).fetchone()
        if row is not None:
            if kind is not MatchKind.EXACT:
                logger.debug("No exact schedule for %s, using %s match", day, kind.value)
            return int(row[0]), kind
    raise NoRecordsExistError("no basal records found")
