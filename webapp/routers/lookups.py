"""Lookup audit API router for ReciboWatch.

Endpoints:
- POST /api/lookups/analyze   upload a .txt lookup log and get events, profiles, summary, charts
- POST /api/lookups/export    upload a .txt lookup log and download the xlsx workbook
- POST /api/lookups/timeline  upload a .txt lookup log and get day/hour activity groups
- POST /api/lookups/table     upload a .txt lookup log and get one searched/sorted page of users or subjects

Every request is analyzed from scratch; nothing is stored server-side.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from backend.lookups.charts import generate_all_charts, timeline, user_lookup_groups
from backend.lookups.export import export_to_bytes
from backend.lookups.pipeline import LookupAnalysis, run_lookup_analysis
from backend.lookups.reader import LookupFileError, check_extension, decode_upload
from backend.lookups.tables import paginate, search_subjects, search_users, sort_profiles
from backend.settings_store import load_settings

log = logging.getLogger("recibowatch.api.lookups")

router = APIRouter(prefix="/api/lookups", tags=["lookups"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

NO_DATA_MESSAGE = "No se encontraron registros de consultas en el archivo. Verifique el formato."


async def _analyze_upload(file: UploadFile) -> LookupAnalysis:
    """Read the upload and run the analysis. Raises LookupFileError on bad files."""
    check_extension(file.filename or "")
    try:
        content = await file.read()
    except OSError as e:
        raise LookupFileError(f"Cannot read upload: {e}") from e
    text = decode_upload(content)
    return await run_in_threadpool(run_lookup_analysis, text, load_settings())


def _file_error(e: LookupFileError) -> JSONResponse:
    log.warning("Rejected lookup upload: %s", e)
    return JSONResponse({"status": "error", "error": str(e)}, status_code=400)


def _empty() -> JSONResponse:
    return JSONResponse({"status": "empty", "message": NO_DATA_MESSAGE})


@router.post("/analyze")
async def lookups_analyze(file: UploadFile = File(...)) -> Any:
    """Upload a lookup log and run the full analysis."""
    try:
        analysis = await _analyze_upload(file)
    except LookupFileError as e:
        return _file_error(e)
    except Exception as e:
        log.exception("Lookup analysis error")
        return JSONResponse({"status": "error", "error": str(e)}, status_code=500)

    if not analysis.has_data:
        return _empty()

    result = {"status": "ok", "file_name": file.filename}
    result.update(analysis.to_dict())
    result["charts"] = generate_all_charts(analysis)
    return JSONResponse(result)


@router.post("/timeline")
async def lookups_timeline(
    file: UploadFile = File(...),
    mode: str = Form("day"),
    actor_id: str = Form(""),
):
    """Activity grouped by day or hour, optionally for one user."""
    if mode not in ("day", "hour"):
        return JSONResponse({"status": "error", "error": f"invalid mode: {mode}"}, status_code=400)
    try:
        analysis = await _analyze_upload(file)
    except LookupFileError as e:
        return _file_error(e)

    if not analysis.has_data:
        return _empty()

    actor = actor_id or None
    payload = {"status": "ok", "mode": mode, "groups": timeline(analysis.events, mode=mode, actor_id=actor)}
    if actor:
        payload["subjects"] = user_lookup_groups(analysis.events, actor)
    return JSONResponse(payload)


@router.post("/table")
async def lookups_table(
    file: UploadFile = File(...),
    table: str = Form("users"),
    search: str = Form(""),
    sort: str = Form(""),
    descending: bool = Form(True),
    page: int = Form(1),
    per_page: Optional[int] = Form(None),
):
    """One page of the user or subject table, filtered and sorted."""
    if table not in ("users", "subjects"):
        return JSONResponse({"status": "error", "error": f"invalid table: {table}"}, status_code=400)
    try:
        analysis = await _analyze_upload(file)
    except LookupFileError as e:
        return _file_error(e)

    if not analysis.has_data:
        return _empty()

    if table == "users":
        rows = search_users(analysis.users, search)
    else:
        rows = search_subjects(analysis.subjects, search)
    try:
        if sort:
            rows = sort_profiles(rows, sort, descending=descending)
        result = paginate(rows, page=page, per_page=per_page or load_settings().items_per_page)
    except ValueError as e:
        return JSONResponse({"status": "error", "error": str(e)}, status_code=400)

    return JSONResponse({
        "status": "ok",
        "table": table,
        "items": [row.to_dict() for row in result.items],
        "page": result.page,
        "per_page": result.per_page,
        "total_pages": result.total_pages,
        "total_items": result.total_items,
        "first_index": result.first_index,
        "last_index": result.last_index,
    })


@router.post("/export")
async def lookups_export(file: UploadFile = File(...)):
    """Upload a lookup log and download the analysis as an Excel workbook."""
    try:
        analysis = await _analyze_upload(file)
    except LookupFileError as e:
        return _file_error(e)

    if not analysis.has_data:
        return JSONResponse({"status": "empty", "message": "No hay datos para exportar"}, status_code=400)

    try:
        content = await run_in_threadpool(export_to_bytes, analysis)
    except Exception as e:
        log.exception("Lookup export error")
        return JSONResponse({"status": "error", "error": str(e)}, status_code=500)

    file_name = f"{load_settings().export_file_name}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
