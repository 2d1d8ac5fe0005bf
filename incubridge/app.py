"""
FastAPI application -- IncuBridge API server.

Run locally:
    uvicorn incubridge.app:app --reload --port 8000

or ``python run.py`` (creates tables, optionally seeds incubators, starts uvicorn).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from incubridge import __version__, config
from incubridge.database import init_db
from incubridge.errors import IncubridgeError
from incubridge.routes import admin, legal, matching, startup, user
from incubridge.services.chat_store import reset_chat_service
from incubridge.services.maintenance import get_maintenance_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialise database schema
    await init_db()

    scheduler = None
    if config.ENABLE_MAINTENANCE:
        scheduler = get_maintenance_scheduler()
        scheduler.start(interval_minutes=config.MAINTENANCE_INTERVAL_MINUTES)

    yield

    # Shutdown
    if scheduler and scheduler.is_running:
        scheduler.stop()
    reset_chat_service()


app = FastAPI(
    title="IncuBridge API",
    version=__version__,
    description="Startup / incubator matching platform with a legal FAQ assistant",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, error: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


@app.exception_handler(IncubridgeError)
async def handle_domain_error(request: Request, exc: IncubridgeError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return _error_response(exc.status_code, exc.to_dict())


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    fields = {
        ".".join(str(p) for p in err.get("loc", ()) if p != "body"): err.get("msg", "")
        for err in exc.errors()
    }
    return _error_response(
        400,
        {"kind": "validation", "message": "Invalid request", "details": {"fields": fields}},
    )


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error_response(
        500,
        {"kind": "server_error", "message": "Internal server error", "details": {}},
    )


app.include_router(user.router)
app.include_router(admin.router)
app.include_router(startup.router)
app.include_router(matching.router)
app.include_router(legal.router)

config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=config.UPLOAD_DIR), name="uploads")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
        "maintenance_running": get_maintenance_scheduler().is_running,
    }
