"""Persistencia SQLite para esquemas basales y sus intervalos."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import date, datetime, tzinfo
from pathlib import Path

import pandas as pd

from basal_tool.errors import RecordNotFoundError, StorageFailureError
from basal_tool.lookup import resolve_schedule_id
from basal_tool.model import BasalInterval, BasalSchedule, ScheduleLookup
from basal_tool.timeutil import interval_minutes
from basal_tool.totals import daily_total
from basal_tool.validation import validate_intervals

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS basal_schedules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TEXT NOT NULL,
    total_units REAL NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS basal_intervals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    schedule_id INTEGER NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    units_per_hour REAL NOT NULL,
    FOREIGN KEY(schedule_id) REFERENCES basal_schedules(id) ON DELETE CASCADE,
    CHECK (start_time GLOB '[0-2][0-9]:[0-5][0-9]' AND start_time <= '23:59'),
    CHECK (end_time GLOB '[0-2][0-9]:[0-5][0-9]' AND end_time <= '23:59'),
    CHECK (units_per_hour >= 0)
);

CREATE INDEX IF NOT EXISTS idx_basal_schedules_date
ON basal_schedules(date);

CREATE INDEX IF NOT EXISTS idx_basal_intervals_schedule_id
ON basal_intervals(schedule_id);
"""

FRAME_COLUMNS = [
    "schedule_id",
    "date",
    "start_time",
    "end_time",
    "units_per_hour",
    "hours",
    "units",
    "total_units",
]


class SQLiteStore:
    """Repositorio SQLite de esquemas basales."""

    def __init__(self, db_path: Path, tz: tzinfo | None = None) -> None:
        """Create store and ensure schema exists.

        Args:
            db_path: SQLite file; parent folders are created.
            tz: Zone used to stamp ``created_at``; naive local time if None.
        """
        self._db_path = db_path
        self._tz = tz
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _session(self, action: str) -> Iterator[sqlite3.Connection]:
        """One connection, one transaction: commit on success, else roll back.

        ``sqlite3.Error`` is re-raised as :class:`StorageFailureError`; domain
        errors propagate unchanged after the rollback.
        """
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise StorageFailureError(f"{action}: {exc}") from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.error("%s failed, transaction rolled back: %s", action, exc)
            raise StorageFailureError(f"{action}: {exc}") from exc
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._session("creating tables") as conn:
            conn.executescript(SCHEMA_SQL)

    def create(self, day: date, intervals: Sequence[BasalInterval]) -> int:
        """Validate and store a schedule with all its intervals atomically.

        Args:
            day: Calendar date the schedule applies to.
            intervals: Intervals in entry order, covering the whole day.

        Returns:
            The new schedule id.
        """
        checked = validate_intervals(intervals)
        total_units = daily_total(checked)
        created_at = datetime.now(tz=self._tz).isoformat(timespec="seconds")
        with self._session("inserting basal schedule") as conn:
            cur = conn.execute(
                """
                INSERT INTO basal_schedules(date, total_units, created_at)
                VALUES (?, ?, ?)
                """,
                (day.isoformat(), total_units, created_at),
            )
            schedule_id = int(cur.lastrowid)
            conn.executemany(
                """
                INSERT INTO basal_intervals(
                    schedule_id, start_time, end_time, units_per_hour
                ) VALUES (?, ?, ?, ?)
                """,
                [
                    (schedule_id, iv.start_time, iv.end_time, iv.units_per_hour)
                    for iv in checked
                ],
            )
        logger.info(
            "Created schedule %d for %s (%d intervals, %.2f U)",
            schedule_id,
            day.isoformat(),
            len(checked),
            total_units,
        )
        return schedule_id

    def get(self, schedule_id: int) -> tuple[BasalSchedule, tuple[BasalInterval, ...]]:
        """Fetch one schedule and its intervals by id."""
        with self._session("reading basal schedule") as conn:
            return _load_schedule(conn, schedule_id)

    def get_by_date(self, day: date) -> ScheduleLookup:
        """Resolve ``day`` to a schedule: exact, closest prior or earliest.

        Raises:
            NoRecordsExistError: If the store is empty.
        """
        with self._session("reading basal schedule") as conn:
            schedule_id, match = resolve_schedule_id(conn, day)
            schedule, intervals = _load_schedule(conn, schedule_id)
        return ScheduleLookup(schedule=schedule, intervals=intervals, match=match)

    def list_schedules(self) -> list[BasalSchedule]:
        """All schedules, newest date first."""
        with self._session("listing basal schedules") as conn:
            rows = conn.execute(
                """
                SELECT id, date, total_units, created_at
                FROM basal_schedules
                ORDER BY date DESC, id DESC
                """
            ).fetchall()
        return [_row_to_schedule(row) for row in rows]

    def delete(self, schedule_id: int) -> None:
        """Remove a schedule and its intervals in one transaction."""
        with self._session("deleting basal schedule") as conn:
            conn.execute(
                "DELETE FROM basal_intervals WHERE schedule_id = ?", (schedule_id,)
            )
            cur = conn.execute(
                "DELETE FROM basal_schedules WHERE id = ?", (schedule_id,)
            )
            if cur.rowcount == 0:
                raise RecordNotFoundError(schedule_id)
        logger.info("Deleted schedule %d", schedule_id)

    def load_schedules_frame(self) -> pd.DataFrame:
        """Carga todos los esquemas con sus intervalos como DataFrame."""
        with self._session("reading basal schedules") as conn:
            rows = conn.execute(
                """
                SELECT
                    s.id AS schedule_id, s.date, i.start_time, i.end_time,
                    i.units_per_hour, s.total_units
                FROM basal_schedules s
                JOIN basal_intervals i ON i.schedule_id = s.id
                ORDER BY s.date DESC, s.id DESC, i.start_time
                """
            ).fetchall()

        out = pd.DataFrame([dict(row) for row in rows])
        if out.empty:
            return pd.DataFrame(columns=FRAME_COLUMNS)
        out["date"] = pd.to_datetime(out["date"], errors="coerce").dt.date
        out["hours"] = [
            interval_minutes(start, end) / 60.0
            for start, end in zip(out["start_time"], out["end_time"])
        ]
        out["units"] = (out["hours"] * out["units_per_hour"]).round(3)
        return out[FRAME_COLUMNS]


def _load_schedule(
    conn: sqlite3.Connection, schedule_id: int
) -> tuple[BasalSchedule, tuple[BasalInterval, ...]]:
    row = conn.execute(
        """
        SELECT id, date, total_units, created_at
        FROM basal_schedules WHERE id = ?
        """,
        (schedule_id,),
    ).fetchone()
    if row is None:
        raise RecordNotFoundError(schedule_id)
    interval_rows = conn.execute(
        """
        SELECT id, schedule_id, start_time, end_time, units_per_hour
        FROM basal_intervals
        WHERE schedule_id = ?
        ORDER BY start_time
        """,
        (schedule_id,),
    ).fetchall()
    intervals = tuple(
        BasalInterval(
            start_time=r["start_time"],
            end_time=r["end_time"],
            units_per_hour=float(r["units_per_hour"]),
            id=int(r["id"]),
            schedule_id=int(r["schedule_id"]),
        )
        for r in interval_rows
    )
    return _row_to_schedule(row), intervals


def _row_to_schedule(row: sqlite3.Row) -> BasalSchedule:
    created_raw = row["created_at"]
    return BasalSchedule(
        id=int(row["id"]),
        day=date.fromisoformat(row["date"]),
        total_units=float(row["total_units"]),
        created_at=datetime.fromisoformat(created_raw) if created_raw else None,
    )
