# File: tazasu/api/v1/routes_upload.py

"""
Generic authenticated image uploads. ``type=avatar`` stores into the avatar
area with the avatar size limit; anything else is treated as a complaint
photo.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile

from tazasu.api.deps import CurrentUser, Uploads
from tazasu.core.errors import ValidationError
from tazasu.schemas.common import MultiUploadResponse, UploadResponse
from tazasu.services.upload_service import UploadKind

logger = logging.getLogger(__name__)

router = APIRouter()


def _kind(upload_type: Optional[str]) -> UploadKind:
    return UploadKind.AVATAR if upload_type == UploadKind.AVATAR.value else UploadKind.GENERAL


@router.post("/", response_model=UploadResponse, summary="Upload one image")
async def upload_file(
    user: CurrentUser,
    uploads: Uploads,
    file: Optional[UploadFile] = File(None),
    upload_type: Optional[str] = Form(None, alias="type"),
):
    if file is None or not file.filename:
        raise ValidationError("No file was uploaded", field="file")

    stored = await uploads.accept(file, _kind(upload_type))
    logger.info("File %s uploaded by %s", stored.filename, user.email)
    return {"message": "File uploaded successfully", "file": stored.to_dict()}


@router.post("/multiple", response_model=MultiUploadResponse, summary="Upload up to 5 images")
async def upload_files(
    user: CurrentUser,
    uploads: Uploads,
    files: Optional[list[UploadFile]] = File(None),
    upload_type: Optional[str] = Form(None, alias="type"),
):
    stored = await uploads.accept_many(files or [], _kind(upload_type))
    logger.info("%d files uploaded by %s", len(stored), user.email)
    return {
        "message": f"Successfully uploaded {len(stored)} files",
        "files": [s.to_dict() for s in stored],
    }
