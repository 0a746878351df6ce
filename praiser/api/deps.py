"""Shared FastAPI dependencies — engine, storage, admin auth injection.

Module-level singletons for each service. Route handlers access them via
FastAPI's Depends() system — never by importing implementations directly.
Tests swap them with app.dependency_overrides or by assigning the
module attributes.

Usage:
    from praiser.api.deps import get_praise_engine

    @router.post("/something")
    async def do_thing(engine: PraiseEngine = Depends(get_praise_engine)): ...
"""

import logging

from fastapi import Depends, Header, HTTPException

from praiser.ai.catalog import ModelCatalog
from praiser.ai.praise import PraiseEngine
from praiser.ai.providers.base import ChatProvider
from praiser.config import Settings, get_settings
from praiser.hooks.interfaces import AdminAuth, DocumentStore, FileStorage
from praiser.schemas import ApiError, ApiResponse

logger = logging.getLogger("praiser")

# ---------------------------------------------------------------------------
# Service singletons — set by create_app() in main.py at startup
# ---------------------------------------------------------------------------

_praise_engine: PraiseEngine | None = None
_file_storage: FileStorage | None = None
_document_store: DocumentStore | None = None
_admin_auth: AdminAuth | None = None


def _unavailable(what: str) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail=ApiResponse(
            ok=False,
            error=ApiError(
                code="SERVICE_UNAVAILABLE",
                message=f"{what} is not available.",
            ),
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Dependency providers
# ---------------------------------------------------------------------------


def get_praise_engine() -> PraiseEngine:
    """Returns the praise engine singleton.

    Raises HTTPException(503) when no provider is configured (no
    GROQ_API_KEY and stub mode off).
    """
    if _praise_engine is None:
        raise _unavailable("AI provider")
    return _praise_engine


def get_chat_engine() -> PraiseEngine | None:
    """Returns the praise engine, or None when stub mode answers instead.

    Outside stub mode this is get_praise_engine(), 503 included.
    """
    if get_settings().use_groq_stub:
        return None
    return get_praise_engine()


def get_file_storage() -> FileStorage:
    """Returns the upload storage singleton."""
    if _file_storage is None:
        raise _unavailable("File storage")
    return _file_storage


def get_document_store() -> DocumentStore:
    """Returns the JSON document store singleton."""
    if _document_store is None:
        raise _unavailable("Document store")
    return _document_store


def get_admin_auth() -> AdminAuth:
    """Returns the admin auth singleton."""
    if _admin_auth is None:
        raise _unavailable("Admin auth")
    return _admin_auth


async def require_admin(
    x_admin_user: str = Header(default=""),
    x_admin_password: str = Header(default=""),
    auth: AdminAuth = Depends(get_admin_auth),
) -> None:
    """Rejects the request with 401 unless the admin headers check out."""
    if not await auth.verify(x_admin_user, x_admin_password):
        raise HTTPException(
            status_code=401,
            detail=ApiResponse(
                ok=False,
                error=ApiError(
                    code="UNAUTHORIZED",
                    message="Invalid admin credentials.",
                ),
            ).model_dump(),
        )


# ---------------------------------------------------------------------------
# Provider / engine factory
# ---------------------------------------------------------------------------


def create_provider(settings: Settings) -> ChatProvider | None:
    """Builds the Groq provider, or None when no API key is configured.

    Local import keeps the openai SDK out of module load for tests that
    never construct a real provider.
    """
    if not settings.groq_api_key:
        return None

    from praiser.ai.providers.groq import GroqProvider

    return GroqProvider(api_key=settings.groq_api_key, base_url=settings.groq_base_url)


def create_engine(provider: ChatProvider, settings: Settings) -> PraiseEngine:
    """Wires a provider to its own model catalog."""
    fetcher = provider.list_models if settings.groq_api_key else None
    catalog = ModelCatalog(fetcher=fetcher, ttl=settings.model_cache_ttl_seconds)
    return PraiseEngine(provider, catalog)
