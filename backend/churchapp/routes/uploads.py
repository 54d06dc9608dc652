"""
ChurchApp Backend — Upload Routes
===================================

    POST /upload/avatar          member avatar
    POST /upload/church-avatar   church logo/avatar
    POST /upload/event-image     event banner
    GET  /uploads/avatars/{name} serve a stored file

All three upload kinds share the same validation (JPEG/PNG/WEBP, at most
MAX_UPLOAD_SIZE bytes, non-empty) and land in the same avatars directory.
The multipart field is `file`; the response is {"url": "/uploads/avatars/<name>"}.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse

from churchapp.config import settings
from churchapp.dependencies import authenticate
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.common import ErrorResponse
from churchapp.schemas.upload import UploadResponse
from churchapp.services.upload_service import upload_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Uploads"])
files_router = APIRouter(prefix="/uploads", tags=["Uploads"])

UPLOAD_RESPONSES = {
    400: {"description": "Wrong type, empty, or too large", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
}


async def _store(kind: str, file: UploadFile, user: CurrentUser) -> UploadResponse:
    try:
        # Read one byte past the limit so oversize files are detected
        # without buffering an unbounded body
        content = await file.read(settings.max_upload_size + 1)
    finally:
        await file.close()

    logger.info(
        "Upload %s from user %s: content_type=%s size=%d",
        kind, user.sub, file.content_type, len(content),
    )
    url = await upload_service.validate_and_store(file.content_type, content)
    return UploadResponse(url=url)


@router.post("/avatar", response_model=UploadResponse, responses=UPLOAD_RESPONSES)
async def upload_avatar(
    file: UploadFile = File(..., description="JPEG, PNG or WEBP, max 5MB"),
    user: CurrentUser = Depends(authenticate),
) -> UploadResponse:
    return await _store("avatar", file, user)


@router.post("/church-avatar", response_model=UploadResponse, responses=UPLOAD_RESPONSES)
async def upload_church_avatar(
    file: UploadFile = File(..., description="JPEG, PNG or WEBP, max 5MB"),
    user: CurrentUser = Depends(authenticate),
) -> UploadResponse:
    return await _store("church-avatar", file, user)


@router.post("/event-image", response_model=UploadResponse, responses=UPLOAD_RESPONSES)
async def upload_event_image(
    file: UploadFile = File(..., description="JPEG, PNG or WEBP, max 5MB"),
    user: CurrentUser = Depends(authenticate),
) -> UploadResponse:
    return await _store("event-image", file, user)


@files_router.get(
    "/avatars/{name}",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve a stored upload",
)
async def serve_upload(name: str) -> FileResponse:
    path = upload_service.resolve_stored(name)
    return FileResponse(path=str(path), headers={"Cache-Control": "public, max-age=86400"})
