"""
File upload endpoint for form respondents.

Files are forwarded to the media host; only the resulting URL metadata is
stored later, inside the submission.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from promptforms.config import Settings, get_settings
from promptforms.errors import MediaUploadError, ServiceNotConfigured
from promptforms.schemas import UploadedMedia
from promptforms.services.media_uploader import MediaUploader, get_media_uploader

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/uploads", tags=["uploads"])


@router.post("", response_model=UploadedMedia)
def upload_file(
    file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> UploadedMedia:
    """Accept one multipart file, validate its size, and push it to the media host."""
    original_filename = file.filename or "upload"

    contents = file.file.read()
    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if len(contents) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds maximum size of {settings.MAX_UPLOAD_SIZE_MB} MB",
        )
    if not contents:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    try:
        return uploader.upload(original_filename, contents, file.content_type)
    except ServiceNotConfigured:
        logger.error("Upload requested but Cloudinary is not configured")
        raise HTTPException(status_code=503, detail="File uploads are not configured")
    except MediaUploadError:
        raise HTTPException(status_code=502, detail="File upload failed")
