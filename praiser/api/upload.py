"""Upload and media routes — person photos and videos.

POST /upload stores one file through the FileStorage hook and returns
its URL. GET /media/{kind}/{filename} serves what LocalFileStorage
wrote, backing the URLs it hands out.
"""

import logging
import secrets
import string
import time

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from starlette.responses import FileResponse

from praiser.api.deps import get_file_storage
from praiser.hooks.interfaces import FileStorage
from praiser.hooks.storage import MEDIA_KINDS
from praiser.schemas import ApiError, ApiResponse, UploadResult

logger = logging.getLogger(__name__)

router = APIRouter()
media_router = APIRouter()

DEFAULT_EXTENSIONS = {"image": "jpg", "video": "mp4"}

_ALPHABET = string.ascii_lowercase + string.digits


def _bad_request(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail=ApiResponse(ok=False, error=ApiError(code=code, message=message)).model_dump(),
    )


def make_upload_filename(original: str, kind: str) -> str:
    """Builds "{millis}-{random}.{ext}", keeping the original extension."""
    stem, dot, extension = original.rpartition(".")
    if not dot or not stem or not extension.isalnum():
        extension = DEFAULT_EXTENSIONS[kind]
    token = "".join(secrets.choice(_ALPHABET) for _ in range(13))
    return f"{int(time.time() * 1000)}-{token}.{extension.lower()}"


@router.post("")
async def upload(
    file: UploadFile | None = File(default=None),
    type: str = Form(default="image"),
    storage: FileStorage = Depends(get_file_storage),
) -> dict:
    if file is None:
        raise _bad_request("FILE_REQUIRED", "No file provided.")
    if type not in MEDIA_KINDS:
        raise _bad_request("INVALID_TYPE", f"Unknown upload type: {type}.")

    content_type = file.content_type or ""
    if not content_type.startswith(f"{type}/"):
        raise _bad_request("INVALID_FILE", f"Invalid {type} file.")

    original = file.filename or ""
    filename = make_upload_filename(original, type)
    data = await file.read()
    url = await storage.store(type, filename, data, content_type)

    result = UploadResult(url=url, filename=filename, type=content_type, name=original)
    return ApiResponse(ok=True, data=result.model_dump()).model_dump()


@media_router.get("/{kind}/{filename}")
async def serve_media(
    kind: str,
    filename: str,
    storage: FileStorage = Depends(get_file_storage),
) -> FileResponse:
    """Serves an uploaded file. Unsafe names and unknown files are 404."""
    path = storage.resolve(kind, filename)
    if path is None or not path.is_file():
        raise HTTPException(
            status_code=404,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="MEDIA_NOT_FOUND", message="Media file not found."),
            ).model_dump(),
        )
    return FileResponse(path)
