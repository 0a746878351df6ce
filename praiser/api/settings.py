"""Settings and admin routes.

Settings are an opaque JSON document owned by the client (website
builder state, admin choices). Reading is open; writing requires the
admin headers checked by require_admin.

POST /admin/login lets the admin panel check credentials before it
shows anything.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from praiser.api.deps import get_admin_auth, get_document_store, require_admin
from praiser.hooks.interfaces import AdminAuth, DocumentStore
from praiser.schemas import ApiError, ApiResponse, SettingsBody

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()

SETTINGS_KEY = "settings"


class LoginRequest(BaseModel):
    """Request body for POST /admin/login."""

    username: str
    password: str


@router.get("")
async def get_settings_document(
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    try:
        settings = await store.load(SETTINGS_KEY)
    except Exception:
        logger.exception("Error reading settings")
        settings = None
    return ApiResponse(ok=True, data={"settings": settings}).model_dump()


@router.post("", dependencies=[Depends(require_admin)])
async def save_settings_document(
    body: SettingsBody,
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    if not body.settings:
        raise HTTPException(
            status_code=400,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="SETTINGS_REQUIRED", message="No settings provided."),
            ).model_dump(),
        )

    try:
        await store.save(SETTINGS_KEY, body.settings)
    except OSError as exc:
        logger.error("Error saving settings: %s", exc)
        raise HTTPException(
            status_code=500,
            detail=ApiResponse(
                ok=False,
                error=ApiError(
                    code="SAVE_FAILED",
                    message="Failed to save settings.",
                    details=str(exc),
                ),
            ).model_dump(),
        ) from exc

    logger.info("Settings saved (%d top-level keys)", len(body.settings))
    return ApiResponse(ok=True, data={"success": True}).model_dump()


@admin_router.post("/login")
async def login(
    body: LoginRequest,
    auth: AdminAuth = Depends(get_admin_auth),
) -> dict:
    if not await auth.verify(body.username, body.password):
        raise HTTPException(
            status_code=401,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="UNAUTHORIZED", message="Invalid admin credentials."),
            ).model_dump(),
        )
    return ApiResponse(ok=True, data={"authenticated": True}).model_dump()
