"""
ChurchApp Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers.
Who:   uvicorn (uvicorn churchapp.main:app) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐      │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │      │
    │  └──────────────┘ └──────────┘ └─────────────────┘      │
    │                                                         │
    │  Routes:                                                │
    │  /auth /admin /churches /branches /members /permissions │
    │  /positions /finances /events /contributions            │
    │  /devotionals /upload /uploads /health                  │
    │                                                         │
    │  Exception Handlers:                                    │
    │  ChurchAppError → its status_code / error_code          │
    │  RequestValidationError → 400 │ Exception → 500         │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, uploads directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from churchapp import __version__
from churchapp.config import settings
from churchapp.database import dispose_engine
from churchapp.exceptions import (
    ChurchAppError,
    DatabaseError,
    FileStorageError,
    RateLimitExceededError,
)
from churchapp.middleware.logging import RequestLoggingMiddleware
from churchapp.middleware.rate_limit import RateLimitMiddleware
from churchapp.middleware.request_id import RequestIDMiddleware, request_id_var
from churchapp.routes import (
    admin,
    auth,
    branches,
    churches,
    contributions,
    devotionals,
    events,
    finances,
    health,
    members,
    permissions,
    positions,
    uploads,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: 2024-01-15T12:00:00 [INFO] churchapp.services.auth_service: message
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise from libraries; our access log covers requests
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("ChurchApp Backend %s starting up (env=%s)", __version__, settings.app_env)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health can report; the log carries the problem
        logger.error("Configuration error: %s", str(e))

    uploads_dir = Path(settings.uploads_root) / "avatars"
    uploads_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Uploads directory: %s", uploads_dir.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("ChurchApp Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# pydantic error types with a fixed pt-BR message
_VALIDATION_MESSAGES = {
    "missing": "Campo obrigatório: {field}",
    "json_invalid": "JSON inválido",
    "string_too_short": "Campo muito curto: {field}",
    "string_too_long": "Campo muito longo: {field}",
    "too_short": "Informe ao menos um item: {field}",
    "decimal_parsing": "Número inválido: {field}",
    "float_parsing": "Número inválido: {field}",
    "int_parsing": "Número inválido: {field}",
    "enum": "Valor inválido: {field}",
    "datetime_from_date_parsing": "Data inválida: {field}",
    "datetime_parsing": "Data inválida: {field}",
    "date_from_datetime_parsing": "Data inválida: {field}",
}

_VALUE_ERROR_PREFIX = "Value error, "


def _field_name(loc) -> str:
    # loc looks like ("body", "amount") or ("body",) for a bad document
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def localize_validation_error(error: dict) -> str:
    """Human-readable pt-BR message for one pydantic error entry."""
    field = _field_name(error.get("loc", ()))
    message = error.get("msg", "")
    if error.get("type") == "value_error":
        return message[len(_VALUE_ERROR_PREFIX):] if message.startswith(_VALUE_ERROR_PREFIX) else message
    template = _VALIDATION_MESSAGES.get(error.get("type", ""))
    if template:
        return template.format(field=field)
    return f"Dados inválidos: {field}"


def _error_body(exc: ChurchAppError, rid: str, include_details: bool = True) -> dict:
    body = {"error": exc.error_code, "message": exc.message, "request_id": rid}
    if include_details and exc.context:
        body["details"] = exc.context
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP responses with one body shape:

        {"error": <code>, "message": <pt-BR text>, "details"?: {...}, "request_id": <id>}

    Server-side failures (5xx) never echo internal context to the client;
    it goes to the log instead.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = exc.errors()
        details = [
            {
                "field": _field_name(e.get("loc", ())),
                "message": localize_validation_error(e),
                "type": e.get("type"),
            }
            for e in errors
        ]
        message = details[0]["message"] if details else "Dados inválidos"
        logger.warning("[%s] Request validation failed: %s", rid, message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": message,
                "details": {"errors": details},
                "request_id": rid,
            },
        )

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc, rid),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    @app.exception_handler(FileStorageError)
    async def handle_server_side_error(request: Request, exc: ChurchAppError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc, rid, False))

    @app.exception_handler(ChurchAppError)
    async def handle_app_error(request: Request, exc: ChurchAppError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        else:
            logger.info("[%s] %s (%d): %s", rid, type(exc).__name__, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc, rid))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "Ocorreu um erro inesperado. Tente novamente mais tarde.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="ChurchApp API",
        description=(
            "Multi-tenant church management: churches, branches, members, "
            "permissions, positions, finances, events, contributions and devotionals."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    for module in (
        auth,
        admin,
        churches,
        branches,
        members,
        permissions,
        positions,
        finances,
        events,
        contributions,
        devotionals,
        uploads,
        health,
    ):
        app.include_router(module.router)
    app.include_router(uploads.files_router)

    return app


app = create_app()
