from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from backend.settings import APP_NAME, APP_VERSION, AUTHOR_EMAIL
from backend.settings_store import load_settings, save_settings
from webapp.routers import lookups as lookups_router


app = FastAPI(title=f"{APP_NAME} Web", version=APP_VERSION)
app.include_router(lookups_router.router)


@app.get("/")
def home() -> Any:
    return {"app": APP_NAME, "version": APP_VERSION, "docs": "/docs"}


@app.get("/api/info")
def api_info() -> Any:
    return {
        "app_name": APP_NAME,
        "app_version": APP_VERSION,
        "author_email": AUTHOR_EMAIL,
        "accepted_files": [".txt"],
    }


# ---------- API: settings ----------

@app.get("/api/settings")
def api_get_settings() -> Any:
    return asdict(load_settings())


@app.post("/api/settings")
def api_save_settings(payload: Dict[str, Any]) -> Any:
    s = load_settings()
    try:
        if "high_risk_threshold" in payload:
            s.high_risk_threshold = int(payload.get("high_risk_threshold") or 70)
        if "items_per_page" in payload:
            s.items_per_page = max(1, int(payload.get("items_per_page") or 10))
    except (TypeError, ValueError) as e:
        return JSONResponse({"status": "error", "error": f"invalid number: {e}"}, status_code=400)
    if "unknown_sentinel" in payload:
        s.unknown_sentinel = str(payload.get("unknown_sentinel") or "Desconocido")
    if "export_file_name" in payload:
        s.export_file_name = str(payload.get("export_file_name") or "analisis_consultas_recibos")
    save_settings(s)
    return {"ok": True}
