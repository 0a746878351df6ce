"""FastAPI application — entry point, middleware, and health endpoint.

Creates the Praiser backend API with:
- API versioning via router prefix (/api/v1/)
- CORS middleware (origins from settings)
- Request logging middleware (raw ASGI — no response body buffering)
- Global exception handlers (HTTPException, validation, catch-all)
- Health endpoint

Run with: uvicorn praiser.main:app --reload
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from praiser.config import Settings, get_settings
from praiser.schemas import ApiError, ApiResponse

logger = logging.getLogger("praiser")


# ---------------------------------------------------------------------------
# Request logging middleware (raw ASGI)
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware:
    """Logs method, path, status code, and duration for every request.

    Does NOT log request/response bodies, query params, admin headers, or
    client IPs. Conversations and person profiles stay out of the logs.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "?")
        path = scope.get("path", "?")
        start = time.monotonic()
        status_code = 0

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, logging_send)
        finally:
            duration_ms = (time.monotonic() - start) * 1000
            logger.info(
                "%s %s %d %.1fms", method, path, status_code, duration_ms
            )


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def _http_exception_response(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wraps HTTPException in ApiResponse envelope.

    If the detail is already an ApiResponse dict (routes and deps build
    their own), returns it directly. Otherwise wraps in a generic error.
    """
    if isinstance(exc.detail, dict) and "ok" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content=exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse(
            ok=False,
            error=ApiError(code="HTTP_ERROR", message=str(exc.detail)),
        ).model_dump(),
    )


def _validation_error_response(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Wraps Pydantic validation errors in ApiResponse envelope.

    Returns a human-readable summary of the first error.
    """
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = " -> ".join(str(part) for part in first.get("loc", []))
        msg = first.get("msg", "Validation error")
        detail = f"{loc}: {msg}" if loc else msg
    else:
        detail = "Request validation failed."

    return JSONResponse(
        status_code=422,
        content=ApiResponse(
            ok=False,
            error=ApiError(code="VALIDATION_ERROR", message=detail),
        ).model_dump(),
    )


def _unhandled_exception_response(request: Request, exc: Exception) -> JSONResponse:
    """Catches all unhandled exceptions — never leaks internals to client.

    Logs the full traceback server-side. Returns a generic 500 response.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=500,
        content=ApiResponse(
            ok=False,
            error=ApiError(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred.",
            ),
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


def _init_storage_services(settings: Settings) -> None:
    """Sets the storage and admin singletons in deps.py."""
    from praiser.api import deps
    from praiser.hooks.auth import StaticAdminAuth
    from praiser.hooks.storage import JsonFileStore, LocalFileStorage

    deps._file_storage = LocalFileStorage(settings.data_dir / "uploads")
    deps._document_store = JsonFileStore(settings.data_dir)
    deps._admin_auth = StaticAdminAuth(settings.admin_username, settings.admin_password)


def _init_ai_services(settings: Settings) -> None:
    """Initializes the praise engine singleton during app startup.

    Logs warnings but never prevents startup: storage routes and stub
    mode still work without a Groq key.
    """
    from praiser.api import deps

    _check_api_keys(settings)

    try:
        provider = deps.create_provider(settings)
    except Exception:
        logger.warning(
            "Failed to create Groq provider. AI features will be unavailable.",
            exc_info=True,
        )
        return

    if provider is None:
        return

    deps._praise_engine = deps.create_engine(provider, settings)
    logger.info(
        "AI services initialized: provider=groq, base_url=%s, model_cache_ttl=%ds",
        settings.groq_base_url,
        settings.model_cache_ttl_seconds,
    )


def _check_api_keys(settings: Settings) -> None:
    if settings.use_groq_stub:
        logger.info("PRAISER_USE_GROQ_STUB is on: chat routes return canned replies.")
        return
    if not settings.groq_api_key:
        logger.warning(
            "Missing GROQ_API_KEY. Praise and transcription requests will fail "
            "with 503 until it is set."
        )


def create_app() -> FastAPI:
    """Creates and configures the FastAPI application."""
    settings = get_settings()

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    application = FastAPI(
        title="Praiser",
        description="Chat assistant that praises a person you describe",
        version="0.1.0",
    )

    # -- Middleware (order matters: last added = first executed) --

    # CORS — must be outermost to handle preflight
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_middleware(RequestLoggingMiddleware)

    # -- Exception handlers --
    application.add_exception_handler(StarletteHTTPException, _http_exception_response)
    application.add_exception_handler(RequestValidationError, _validation_error_response)
    application.add_exception_handler(Exception, _unhandled_exception_response)

    # -- Routers --
    _register_routes(application)

    # -- Services --
    _init_storage_services(settings)
    _init_ai_services(settings)

    return application


def _register_routes(application: FastAPI) -> None:
    """Registers all API routers on the application."""
    from fastapi import APIRouter

    v1 = APIRouter(prefix="/api/v1")

    @v1.get("/health")
    async def health() -> dict[str, Any]:
        return ApiResponse(ok=True, data={"status": "healthy"}).model_dump()

    from praiser.api.chat import router as chat_router

    v1.include_router(chat_router, prefix="/groq", tags=["chat"])

    from praiser.api.person import router as person_router

    v1.include_router(person_router, prefix="/person-info", tags=["person"])

    from praiser.api.settings import admin_router, router as settings_router

    v1.include_router(settings_router, prefix="/settings", tags=["settings"])
    v1.include_router(admin_router, prefix="/admin", tags=["admin"])

    from praiser.api.upload import media_router, router as upload_router

    v1.include_router(upload_router, prefix="/upload", tags=["upload"])
    v1.include_router(media_router, prefix="/media", tags=["media"])

    application.include_router(v1)


app = create_app()


def run() -> None:
    """Console entry point: serves the app with uvicorn on APP_PORT."""
    import uvicorn

    uvicorn.run("praiser.main:app", host="0.0.0.0", port=get_settings().app_port)
