"""Exportación a Excel de lecturas y actividad reciente."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from glucose_log.classify import classify
from glucose_log.model import (
    ActivityEntry,
    GlucoseStatus,
    Reading,
    ThresholdConfig,
)

_STATUS_LABEL: dict[GlucoseStatus, str] = {
    GlucoseStatus.LOW: "Bajo",
    GlucoseStatus.NORMAL: "En rango",
    GlucoseStatus.HIGH: "Alto",
}

_STATUS_FILL: dict[str, str] = {
    "Bajo": "FFF3CD",
    "Alto": "F8D7DA",
}

_WIDTHS: dict[str, int] = {
    "Fecha": 12,
    "Hora": 8,
    "Glucosa (mg/dL)": 14,
    "Estado": 10,
    "Tipo": 12,
    "Momento": 16,
    "Detalle": 40,
}


@dataclass(frozen=True)
class ExcelLayout:
    """Sheet names for the export workbook."""

    readings_sheet: str = "Lecturas"
    activity_sheet: str = "Actividad"


def readings_frame(
    readings: Sequence[Reading], thresholds: ThresholdConfig
) -> pd.DataFrame:
    """One row per reading with its range classification."""
    rows = [
        {
            "Fecha": r.day.isoformat() if r.day is not None else "",
            "Hora": r.time,
            "Glucosa (mg/dL)": r.value,
            "Estado": _STATUS_LABEL[classify(r.value, thresholds)],
        }
        for r in readings
    ]
    return pd.DataFrame(rows, columns=["Fecha", "Hora", "Glucosa (mg/dL)", "Estado"])


def activity_frame(entries: Sequence[ActivityEntry]) -> pd.DataFrame:
    """One row per activity entry, most recent first."""
    rows = [
        {"Tipo": e.kind, "Momento": e.timestamp, "Detalle": e.details}
        for e in entries
    ]
    return pd.DataFrame(rows, columns=["Tipo", "Momento", "Detalle"])


def write_history_xlsx(
    readings: Sequence[Reading],
    entries: Sequence[ActivityEntry],
    out_path: Path,
    thresholds: ThresholdConfig,
    layout: ExcelLayout = ExcelLayout(),
) -> None:
    """Write readings and recent activity to a formatted workbook.

    Args:
        readings: Full readings history.
        entries: Activity log entries.
        out_path: Output path for the XLSX file.
        thresholds: Range used for the "Estado" column.
        layout: Sheet names.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        readings_frame(readings, thresholds).to_excel(
            writer, index=False, sheet_name=layout.readings_sheet
        )
        activity_frame(entries).to_excel(
            writer, index=False, sheet_name=layout.activity_sheet
        )
        _format_sheet(writer.book[layout.readings_sheet])
        _format_sheet(writer.book[layout.activity_sheet])
        _highlight_status(writer.book[layout.readings_sheet])


def _format_sheet(ws: Any) -> None:
    """Aplica cabecera en negrita, bordes y anchos por cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = center
        cell.border = border
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.border = border
    for cell in ws[1]:
        width = _WIDTHS.get(str(cell.value))
        if width is not None:
            ws.column_dimensions[cell.column_letter].width = width


def _highlight_status(ws: Any) -> None:
    """Colorea las filas fuera de rango."""
    headers = [str(cell.value) for cell in ws[1]]
    if "Estado" not in headers:
        return
    idx = headers.index("Estado")
    for row in ws.iter_rows(min_row=2):
        color = _STATUS_FILL.get(str(row[idx].value))
        if color is None:
            continue
        fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        for cell in row:
            cell.fill = fill
