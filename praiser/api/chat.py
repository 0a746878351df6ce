"""Chat routes — praise completion and audio transcription.

Two endpoints under /groq:
- POST /praise: validated ChatRequest → PraiseReply
- POST /transcribe: multipart audio → transcribed text

Validation errors never reach the engine: FastAPI rejects malformed
bodies (including praiseVolume outside [0, 100]) with 422 first.

When PRAISER_USE_GROQ_STUB is on, both endpoints answer with canned
content and never touch the provider.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from praiser.ai.errors import (
    ModelsOverCapacityError,
    PraiseError,
    ProviderCallError,
)
from praiser.ai.praise import PraiseEngine
from praiser.api.deps import get_chat_engine
from praiser.schemas import ApiError, ApiResponse, ChatRequest, PraiseReply

logger = logging.getLogger(__name__)

router = APIRouter()

STUB_TRANSCRIPT = (
    "This is a stub transcription. Swap PRAISER_USE_GROQ_STUB to false to hit Groq."
)


def _stub_reply(body: ChatRequest) -> PraiseReply:
    person = body.person_info
    if person is not None:
        return PraiseReply(
            assistant_message=(
                f"Wow, {person.display_name} sounds absolutely incredible! They're clearly "
                "someone special. Want to know more about why they're amazing?"
            ),
        )
    return PraiseReply(
        assistant_message="I'd love to praise someone! Who should we celebrate?",
    )


def _error_response(
    status_code: int, code: str, message: str, *, details: str = "",
    retry_after: int | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse(
            ok=False,
            error=ApiError(
                code=code,
                message=message,
                details=details or None,
                retry_after=retry_after,
            ),
        ).model_dump(),
    )


@router.post("/praise")
async def praise(
    body: ChatRequest,
    engine: PraiseEngine | None = Depends(get_chat_engine),
) -> JSONResponse:
    """Produces the assistant reply for a conversation.

    Returns 503 MODELS_OVER_CAPACITY (with retry_after) when every model
    was over capacity, 500 PRAISE_FAILED for any other terminal failure.
    """
    if engine is None:
        return JSONResponse(
            content=ApiResponse(ok=True, data=_stub_reply(body).model_dump(by_alias=True)).model_dump(),
        )

    try:
        reply = await engine.respond(body.person_info, body.praise_volume, body.messages)
    except ModelsOverCapacityError as exc:
        return _error_response(
            503,
            "MODELS_OVER_CAPACITY",
            str(exc),
            details=exc.detail or "Groq services are experiencing high load.",
            retry_after=exc.retry_after,
        )
    except PraiseError as exc:
        logger.error("Groq praise error: %s", exc)
        return _error_response(
            500, "PRAISE_FAILED", "Failed to generate praise response.",
            details=exc.detail or str(exc),
        )

    return JSONResponse(
        content=ApiResponse(ok=True, data=reply.model_dump(by_alias=True)).model_dump(),
    )


@router.post("/transcribe")
async def transcribe(
    audio: UploadFile | None = File(default=None),
    engine: PraiseEngine | None = Depends(get_chat_engine),
) -> dict:
    """Transcribes an uploaded audio clip. Pass-through to the provider."""
    if engine is None:
        return ApiResponse(ok=True, data={"text": STUB_TRANSCRIPT}).model_dump()

    if audio is None:
        raise HTTPException(
            status_code=400,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="AUDIO_REQUIRED", message="Audio file is required."),
            ).model_dump(),
        )

    data = await audio.read()
    try:
        text = await engine.provider.transcribe(
            audio=data,
            filename=audio.filename or "voice.webm",
            content_type=audio.content_type,
        )
    except ProviderCallError as exc:
        logger.error("Groq transcription error: %s", exc)
        raise HTTPException(
            status_code=500,
            detail=ApiResponse(
                ok=False,
                error=ApiError(
                    code="TRANSCRIPTION_FAILED",
                    message="Failed to transcribe audio.",
                    details=exc.message,
                ),
            ).model_dump(),
        ) from exc

    return ApiResponse(ok=True, data={"text": text}).model_dump()
