"""Person info routes — persist the profile being praised.

GET never fails: a missing or unreadable document reads as null so the
client just starts with an empty profile.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from praiser.api.deps import get_document_store
from praiser.hooks.interfaces import DocumentStore
from praiser.schemas import ApiError, ApiResponse, PersonInfoBody, PersonProfile

logger = logging.getLogger(__name__)

router = APIRouter()

PERSON_INFO_KEY = "person-info"


@router.get("")
async def get_person_info(
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    try:
        document = await store.load(PERSON_INFO_KEY)
        person = PersonProfile.model_validate(document) if document else None
    except Exception:
        logger.exception("Error reading person info")
        person = None

    data = {"personInfo": person.model_dump(by_alias=True) if person else None}
    return ApiResponse(ok=True, data=data).model_dump()


@router.post("")
async def save_person_info(
    body: PersonInfoBody,
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    """Overwrites the stored profile. A null personInfo clears it."""
    document = body.person_info.model_dump(by_alias=True) if body.person_info else None
    try:
        await store.save(PERSON_INFO_KEY, document)
    except OSError as exc:
        logger.error("Error saving person info: %s", exc)
        raise HTTPException(
            status_code=500,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="SAVE_FAILED", message="Failed to save person info."),
            ).model_dump(),
        ) from exc

    return ApiResponse(ok=True, data={"success": True}).model_dump()
