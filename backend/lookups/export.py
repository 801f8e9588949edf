"""Spreadsheet export of a lookup analysis.

Three sheets, each a direct projection of the analysis with Spanish
column headers and DD/MM/YYYY HH:MM:SS dates:
1. Datos Crudos: one row per lookup event
2. Análisis de Usuarios: one row per user profile
3. Análisis de Accesos: one row per subject profile
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, List, Sequence, Tuple, Union

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .parser import LookupEvent, display_date
from .pipeline import LookupAnalysis
from .subjects import SubjectProfile
from .users import UserProfile

log = logging.getLogger("recibowatch.lookups.export")

DEFAULT_FILE_NAME = "analisis_consultas_recibos"

SHEET_EVENTS = "Datos Crudos"
SHEET_USERS = "Análisis de Usuarios"
SHEET_SUBJECTS = "Análisis de Accesos"

EVENT_HEADERS = [
    "Fecha", "ID Usuario", "Legajo", "DNI Usuario", "Nombre Usuario",
    "DNI Consultado", "Apellido", "Nombre", "Tipo", "Coincide DNI",
]
USER_HEADERS = [
    "ID Usuario", "Legajo", "DNI", "Nombre", "Nivel de Sospecha (%)",
    "Total Consultas", "Consultas Propias", "Consultas Ajenas", "Consultas Desconocidas",
    "Personas Consultadas", "Días de Actividad", "Promedio Consultas por Día",
    "Primera Consulta", "Última Consulta", "Porcentaje Consultas Ajenas (%)",
]
SUBJECT_HEADERS = [
    "DNI", "Apellido", "Nombre", "Nivel de Exposición (%)", "Total Accesos",
    "Accesos Propios", "Accesos por Otros", "Usuarios Distintos",
    "Primer Acceso", "Último Acceso", "Porcentaje Accesos Ajenos (%)",
]

_KIND_LABELS = {"unknown": "Desconocido", "self": "Propio", "other": "Ajeno"}


def event_row(ev: LookupEvent) -> List[Any]:
    return [
        display_date(ev.timestamp),
        ev.actor_id,
        ev.actor_badge_number,
        ev.actor_national_id,
        ev.actor_name,
        ev.subject_national_id,
        ev.subject_last_name,
        ev.subject_first_name,
        _KIND_LABELS[ev.kind],
        "Sí" if ev.is_self_lookup else "No",
    ]


def user_row(u: UserProfile) -> List[Any]:
    return [
        u.actor_id,
        u.actor_badge_number,
        u.actor_national_id,
        u.actor_name,
        u.suspicion_score,
        u.total,
        u.self_count,
        u.other_count,
        u.unknown_count,
        u.distinct_subject_count,
        u.active_days,
        round(u.avg_per_active_day, 1),
        display_date(u.first_seen),
        display_date(u.last_seen),
        round(u.other_pct, 1),
    ]


def subject_row(s: SubjectProfile) -> List[Any]:
    return [
        s.national_id,
        s.last_name,
        s.first_name,
        s.exposure_score,
        s.total,
        s.self_accesses,
        s.other_accesses,
        s.distinct_actor_count,
        display_date(s.first_access),
        display_date(s.last_access),
        round(s.other_access_pct, 1),
    ]


def _fill_sheet(ws, headers: Sequence[str], rows: List[List[Any]]) -> None:
    ws.append(list(headers))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)
    ws.freeze_panes = "A2"

    for idx, header in enumerate(headers, start=1):
        width = max([len(str(header))] + [len(str(r[idx - 1])) for r in rows])
        ws.column_dimensions[get_column_letter(idx)].width = min(width + 2, 60)


def build_workbook(analysis: LookupAnalysis) -> Workbook:
    wb = Workbook()
    sheets: List[Tuple[str, Sequence[str], List[List[Any]]]] = [
        (SHEET_EVENTS, EVENT_HEADERS, [event_row(ev) for ev in analysis.events]),
        (SHEET_USERS, USER_HEADERS, [user_row(u) for u in analysis.users]),
        (SHEET_SUBJECTS, SUBJECT_HEADERS, [subject_row(s) for s in analysis.subjects]),
    ]
    ws = wb.active
    for i, (title, headers, rows) in enumerate(sheets):
        if i > 0:
            ws = wb.create_sheet()
        ws.title = title
        _fill_sheet(ws, headers, rows)
    return wb


def export_to_bytes(analysis: LookupAnalysis) -> bytes:
    """Render the workbook in memory (for HTTP downloads)."""
    buf = io.BytesIO()
    build_workbook(analysis).save(buf)
    log.info(
        "Exported workbook: %d events, %d users, %d subjects",
        len(analysis.events), len(analysis.users), len(analysis.subjects),
    )
    return buf.getvalue()


def export_to_file(analysis: LookupAnalysis, path: Union[str, Path]) -> Path:
    """Write the workbook to disk; ``.xlsx`` is appended when missing."""
    path = Path(path)
    if path.suffix.lower() != ".xlsx":
        path = path.with_name(path.name + ".xlsx")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(export_to_bytes(analysis))
    return path
