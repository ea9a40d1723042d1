"""
KK's Cafe Backend - FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires settings → store → services → routes, registers
       middleware and exception handlers, and mounts static directories.
Who:   uvicorn (kkcafe.main:app, or python -m kkcafe); tests call
       create_app() with their own Settings and store.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware:  Request ID → Logging → GZip → CORS     │
    │                                                      │
    │  Routes:                                             │
    │    /api/drinks (GET, POST)  /api/drinks/{id} (GET,   │
    │    PUT, DELETE)             /health                  │
    │                                                      │
    │  Static:  /uploads → upload_dir,  / → public_dir     │
    │                                                      │
    │  Exception Handlers:                                 │
    │    Validation→400  NotFound→404  Conflict→409        │
    │    Storage→500     anything else→500                 │
    └──────────────────────────────────────────────────────┘

Services are built eagerly in create_app() and parked on app.state, so
the app is fully usable even when the ASGI lifespan is not run.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from kkcafe import __version__
from kkcafe.config import Settings, settings as default_settings
from kkcafe.exceptions import (
    CafeError,
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from kkcafe.middleware.logging import RequestLoggingMiddleware
from kkcafe.middleware.request_id import RequestIDMiddleware, request_id_var
from kkcafe.routes import drinks, health
from kkcafe.services.drink_service import DrinkService
from kkcafe.services.file_service import FileService
from kkcafe.stores import DrinkStore, build_store

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise; our own access middleware covers it
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError (+ UploadRejectedError) → 400
        NotFoundError                           → 404
        ConflictError                           → 409
        StorageError                            → 500 (generic message)
        CafeError (base)                        → 500
        Exception (fallback)                    → 500

    Internal details (paths, parser errors) are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.info("[%s] Precondition failed: %s", rid, exc.context)
        return JSONResponse(
            status_code=409,
            content={
                "error": "conflict",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(CafeError)
    async def handle_cafe_error(request: Request, exc: CafeError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    store: Optional[DrinkStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use; defaults to the environment-loaded singleton.
        store: Pre-built DrinkStore (tests); defaults to build_store(app_settings).
    """
    cfg = app_settings or default_settings

    file_service = FileService(
        upload_dir=cfg.upload_dir,
        url_prefix=cfg.uploads_url_prefix,
        max_file_size=cfg.max_file_size,
        max_files=cfg.max_files_per_request,
    )
    drink_store = store or build_store(cfg)
    drink_service = DrinkService(drink_store, file_service)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(cfg.log_level)
        logger.info("=" * 60)
        logger.info("KK's Cafe backend starting up (store=%s)", cfg.store_backend)
        logger.info("Upload directory: %s", file_service.upload_dir)
        logger.info("Server ready at http://%s:%d", cfg.backend_host, cfg.backend_port)
        logger.info("=" * 60)

        yield

        logger.info("KK's Cafe backend shutting down...")
        await drink_store.close()
        logger.info("Shutdown complete.")

    app = FastAPI(
        title="KK's Cafe API",
        description="Drink menu service: drinks with names, descriptions and images.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.file_service = file_service
    app.state.drink_service = drink_service

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "ETag"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(drinks.router)
    app.include_router(health.router)

    # ── Static files (after routes so /api wins) ──────────────────────────
    app.mount(
        cfg.uploads_url_prefix,
        StaticFiles(directory=str(file_service.upload_dir)),
        name="uploads",
    )
    public_dir = Path(cfg.public_dir)
    if public_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(public_dir), html=True), name="public")

    return app


app = create_app()
