"""
Model DESIGNER Translator — FastAPI Backend
===========================================
Turns the visual model graph into runnable PyTorch source code.

Each node of the graph names a plugin; plugins are discovered at startup and
listed for the editor's node palette.

Uses the create_app() factory pattern for clean initialization.
All paths and settings are centralized in config.py.
"""
from __future__ import annotations
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from . import logging_service as logger
from .config import APP_NAME, APP_VERSION, CORS_ORIGINS, LOG_LEVEL
from .constants import ErrorKind


# ─── System Logging Middleware ────────────────────────────────────────────────

class SystemLogMiddleware(BaseHTTPMiddleware):
    """Auto-logs every HTTP request with method, path, status, and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration_ms = round((time.time() - start) * 1000, 1)

        path = request.url.path
        if path in ("/docs", "/redoc", "/openapi.json", "/favicon.ico"):
            return response

        logger.log("system", "INFO", f"{request.method} {path}", {
            "status": response.status_code,
            "duration_ms": duration_ms,
            "client": request.client.host if request.client else "unknown",
        })
        return response


async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request bodies that fail schema validation get the structured error shape."""
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "invalid request")
    return JSONResponse(status_code=422, content={
        "kind": ErrorKind.INVALID_GRAPH,
        "message": f"Malformed request ({where}): {message}" if where else f"Malformed request: {message}",
    })


# ─── App Factory ─────────────────────────────────────────────────────────────

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    logger.set_min_level(LOG_LEVEL)

    application = FastAPI(
        title=APP_NAME,
        description="Translates visual model graphs into PyTorch source code "
                    "through a registry of node plugins.",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "Translation", "description": "Graph → code translation and plugin catalog"},
        ],
    )

    # ── Middleware ────────────────────────────────────────────────────────────
    application.add_middleware(SystemLogMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(RequestValidationError, _invalid_request)

    # ── Routers ──────────────────────────────────────────────────────────────
    from .controllers.translate_controller import router as translate_router

    application.include_router(translate_router)

    # ── Startup: discover plugins ───────────────────────────────────────────
    from .plugins.loader import discover_plugins
    counts = discover_plugins()
    logger.log("system", "INFO", f"Plugins discovered: {counts}")

    # ── Startup: prune expired log files ────────────────────────────────────
    removed = logger.cleanup_old_logs()
    if removed:
        logger.log("system", "INFO", f"Removed {removed} expired log files")

    @application.get("/", include_in_schema=False)
    async def root():
        return {
            "app": APP_NAME,
            "version": APP_VERSION,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    return application


# ─── Module-level app instance (used by uvicorn) ────────────────────────────

app = create_app()
