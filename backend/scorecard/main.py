"""FastAPI application entrypoint."""

import logging
import os
from uuid import uuid4

from fastapi import FastAPI
from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from sqlalchemy import text
from sqlmodel import Session

from scorecard import db
from scorecard.routers.applications import router as applications_router
from scorecard.routers.interviews import router as interviews_router
from scorecard.routers.jobs import router as jobs_router
from scorecard.settings import settings

logging.getLogger("scorecard").setLevel(settings.log_level.upper())


def _resolve_cors_origins() -> list[str]:
    configured_cors_origins = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if not configured_cors_origins:
        return settings.cors_origin_list
    return [origin.strip() for origin in configured_cors_origins.split(",") if origin.strip()]


def _openai_configured() -> bool:
    return any(os.getenv(name, "").strip() for name in ("OPENAI_API_KEY", "OPENAI_EVAL_KEY"))


app = FastAPI(title=settings.app_name, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_resolve_cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

_PUBLIC_PATHS = {
    "/health",
    "/health/deep",
    "/health/cors",
    "/docs",
    "/openapi.json",
    "/redoc",
    "/favicon.ico",
}


@app.middleware("http")
async def enforce_api_key(request: Request, call_next):
    if request.method == "OPTIONS":
        return await call_next(request)

    if request.url.path in _PUBLIC_PATHS:
        return await call_next(request)

    expected_api_key = os.getenv("BACKEND_API_KEY", "").strip()
    if expected_api_key:
        received_api_key = request.headers.get("X-API-Key", "")
        if received_api_key != expected_api_key:
            return JSONResponse(status_code=401, content={"detail": "Unauthorized"})

    return await call_next(request)

app.include_router(jobs_router)
app.include_router(applications_router)
app.include_router(interviews_router)


@app.on_event("startup")
def on_startup() -> None:
    settings.data_path.mkdir(parents=True, exist_ok=True)
    db.create_db_and_tables()


@app.get("/health", tags=["meta"])
def health() -> dict[str, bool]:
    return {"ok": True, "openai_configured": _openai_configured()}


@app.get("/health/deep", tags=["meta"])
def deep_health() -> dict[str, bool | str]:
    data_dir = settings.data_path

    storage_writable = False
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        probe_path = data_dir / f".health_probe_{uuid4().hex}"
        probe_path.write_text("ok", encoding="utf-8")
        probe_path.unlink(missing_ok=True)
        storage_writable = True
    except OSError:
        storage_writable = False

    db_ok = False
    try:
        with Session(db.engine) as session:
            session.exec(text("SELECT 1"))
        db_ok = True
    except Exception:
        db_ok = False

    return {
        "ok": True,
        "openai_configured": _openai_configured(),
        "mock_grading": os.getenv("OPENAI_MOCK", "").strip() == "1",
        "storage_writable": storage_writable,
        "data_dir": str(data_dir),
        "db_ok": db_ok,
    }


@app.get("/health/cors", tags=["meta"])
def cors_health() -> dict[str, bool | list[str]]:
    return {
        "ok": True,
        "origins": _resolve_cors_origins(),
        "has_api_key": bool(os.getenv("BACKEND_API_KEY", "").strip()),
    }


@app.options("/{path:path}", include_in_schema=False)
async def preflight(path: str) -> Response:
    del path
    return Response(status_code=204)
