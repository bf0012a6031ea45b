"""Generación de Excel formateado con los esquemas basales."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

from basal_tool.model import BasalInterval
from basal_tool.totals import rate_profile

logger = logging.getLogger(__name__)

_HEADER_MAP: dict[str, str] = {
    "schedule_id": "ID",
    "date": "Fecha",
    "start_time": "Inicio",
    "end_time": "Fin",
    "units_per_hour": "U/h",
    "hours": "Horas",
    "units": "Unidades",
    "total_units": "Total diario\n(U)",
    "hour": "Hora",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Layout/formatting configuration for the export workbook."""

    sheet_name: str = "Esquemas basales"
    profile_sheet_name: str = "Perfil horario"


def schedule_intervals(frame: pd.DataFrame) -> dict[int, list[BasalInterval]]:
    """Group a flattened schedules frame back into intervals per schedule id."""
    grouped: dict[int, list[BasalInterval]] = {}
    for row in frame.itertuples(index=False):
        grouped.setdefault(int(row.schedule_id), []).append(
            BasalInterval(
                start_time=str(row.start_time),
                end_time=str(row.end_time),
                units_per_hour=float(row.units_per_hour),
            )
        )
    return grouped


def _profile_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Una columna por esquema (fecha) con la tasa media de cada hora."""
    if frame.empty:
        return pd.DataFrame(columns=["hour"])
    labels = {
        int(sid): f"{day.isoformat()} (#{int(sid)})"
        for sid, day in zip(frame["schedule_id"], frame["date"])
    }
    profiles = [
        rate_profile(intervals)
        .set_index("hour")["units_per_hour"]
        .rename(labels[schedule_id])
        for schedule_id, intervals in schedule_intervals(frame).items()
    ]
    return pd.concat(profiles, axis=1).reset_index()


def write_schedules_xlsx(
    frame: pd.DataFrame, out_path: Path, layout: ExcelLayout
) -> None:
    """Write schedules (one row per interval) plus an hourly profile sheet.

    Args:
        frame: Output of ``SQLiteStore.load_schedules_frame``.
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    export_df = frame.rename(columns=_HEADER_MAP)
    profile_df = _profile_frame(frame).rename(columns=_HEADER_MAP)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name=layout.sheet_name)
        profile_df.to_excel(writer, index=False, sheet_name=layout.profile_sheet_name)
        _format_sheet(writer.book[layout.sheet_name])
        _format_sheet(writer.book[layout.profile_sheet_name])
    logger.info("Wrote %d interval rows to %s", len(export_df), out_path)


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    """Establece anchos de columna; las columnas de perfil usan 20."""
    widths = {
        "ID": 6,
        "Fecha": 12,
        "Inicio": 8,
        "Fin": 8,
        "U/h": 8,
        "Horas": 8,
        "Unidades": 10,
        "Total diario\n(U)": 12,
        "Hora": 8,
    }
    for header, idx in col_index.items():
        letter = ws.cell(row=1, column=idx).column_letter
        ws.column_dimensions[letter].width = widths.get(header, 20)


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    fmt_map: dict[str, str] = {
        "Fecha": "dd/mm/yyyy",
        "U/h": "0.000",
        "Horas": "0.00",
        "Unidades": "0.00",
        "Total diario\n(U)": "0.00",
    }
    for row in ws.iter_rows(min_row=2):
        for header, fmt in fmt_map.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
