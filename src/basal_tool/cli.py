"""CLI para registrar y consultar esquemas de insulina basal."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from collections.abc import Sequence
from datetime import date
from pathlib import Path

import pandas as pd
from dateutil import parser as date_parser

from basal_tool.config import BasalConfig, local_zone, now, resolve_config, today
from basal_tool.errors import BasalError
from basal_tool.excel_writer import ExcelLayout, write_schedules_xlsx
from basal_tool.model import BasalInterval, ScheduleLookup
from basal_tool.storage import SQLiteStore

logger = logging.getLogger(__name__)

_DAY_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        prog="basal",
        description="Registro y consulta de tasas basales de insulina.",
    )
    parser.add_argument("--db", default=None, help="Ruta de la base SQLite.")
    parser.add_argument("--tz", default=None, help="Zona horaria (IANA).")
    parser.add_argument("--verbose", action="store_true", help="Log detallado.")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Agregar un esquema basal para una fecha.")
    add.add_argument("--date", default=None, help="YYYY-MM-DD (default: hoy).")
    add.add_argument(
        "--interval",
        nargs=3,
        action="append",
        required=True,
        metavar=("START", "END", "RATE"),
        help="Intervalo en orden, p.ej. --interval 0000 0600 0.8",
    )

    show = sub.add_parser("show", help="Mostrar el esquema de una fecha.")
    show.add_argument("date", nargs="?", default=None, help="YYYY-MM-DD.")

    sub.add_parser("list", help="Listar todos los esquemas.")

    delete = sub.add_parser("delete", help="Borrar un esquema por ID.")
    delete.add_argument("id", type=int)

    export = sub.add_parser("export", help="Exportar todos los esquemas a Excel.")
    export.add_argument("--out", default=None, help="Ruta del .xlsx de salida.")

    return parser.parse_args(argv)


def parse_day(raw: str | None, config: BasalConfig) -> date:
    """Parse a YYYY-MM-DD argument, defaulting to today."""
    if raw is None or not raw.strip():
        return today(config)
    text = raw.strip()
    # isoparse also accepts "2024" and "2024-01"; only full dates are valid.
    if not _DAY_RE.match(text):
        raise ValueError(f"invalid date {raw!r}: use YYYY-MM-DD")
    try:
        return date_parser.isoparse(text).date()
    except ValueError as exc:
        raise ValueError(f"invalid date {raw!r}: use YYYY-MM-DD") from exc


def format_intervals(intervals: Sequence[BasalInterval]) -> str:
    """Render intervals as an aligned text table."""
    table = pd.DataFrame(
        {
            "Intervalo": [f"{iv.start_time} - {iv.end_time}" for iv in intervals],
            "U/h": [f"{iv.units_per_hour:.2f}" for iv in intervals],
        }
    )
    return table.to_string(index=False)


def format_lookup(lookup: ScheduleLookup, requested: date) -> str:
    day = lookup.schedule.day.isoformat()
    if lookup.is_exact:
        header = day
    else:
        header = f"Mostrando el registro más cercano a {requested.isoformat()}: {day}"
    return "\n".join(
        [
            header,
            format_intervals(lookup.intervals),
            "",
            f"Basal diaria: {lookup.schedule.total_units:.2f} U",
        ]
    )


def _cmd_add(store: SQLiteStore, ns: argparse.Namespace, config: BasalConfig) -> int:
    day = parse_day(ns.date, config)
    intervals = [
        BasalInterval(start_time=start, end_time=end, units_per_hour=rate)
        for start, end, rate in ns.interval
    ]
    schedule_id = store.create(day, intervals)
    print(f"OK: esquema {schedule_id} guardado para {day.isoformat()}")
    return 0


def _cmd_show(store: SQLiteStore, ns: argparse.Namespace, config: BasalConfig) -> int:
    day = parse_day(ns.date, config)
    print(format_lookup(store.get_by_date(day), day))
    return 0


def _cmd_list(store: SQLiteStore) -> int:
    schedules = store.list_schedules()
    if not schedules:
        print("No hay registros.")
        return 0
    table = pd.DataFrame(
        {
            "ID": [s.id for s in schedules],
            "Fecha": [s.day.isoformat() for s in schedules],
            "Total (U)": [f"{s.total_units:.2f}" for s in schedules],
        }
    )
    print(table.to_string(index=False))
    return 0


def _cmd_delete(store: SQLiteStore, ns: argparse.Namespace) -> int:
    store.delete(ns.id)
    print(f"OK: esquema {ns.id} borrado")
    return 0


def _cmd_export(
    store: SQLiteStore, ns: argparse.Namespace, config: BasalConfig
) -> int:
    if ns.out:
        out_path = Path(ns.out).expanduser()
    else:
        ts = now(config).strftime("%Y-%m-%d_%H-%M-%S")
        out_path = store.db_path.parent / "salidas" / f"basal_{ts}.xlsx"
    frame = store.load_schedules_frame()
    if frame.empty:
        print("No hay datos para exportar.")
        return 0
    write_schedules_xlsx(frame, out_path, ExcelLayout())
    print(f"OK: Output: {out_path}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the basal CLI.

    Returns:
        Exit code (0 on success, 1 on a handled error).
    """
    ns = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    try:
        config = resolve_config(db_path=ns.db, timezone=ns.tz)
        store = SQLiteStore(config.db_path, tz=local_zone(config))
        logger.debug("Using database %s", config.db_path)
        if ns.command == "add":
            return _cmd_add(store, ns, config)
        if ns.command == "show":
            return _cmd_show(store, ns, config)
        if ns.command == "list":
            return _cmd_list(store)
        if ns.command == "delete":
            return _cmd_delete(store, ns)
        return _cmd_export(store, ns, config)
    except (BasalError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
