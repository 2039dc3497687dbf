"""
Cloudinary media uploads for files attached to form submissions.

Uses unsigned uploads with an upload preset, so no API secret lives on
the server.
"""

from __future__ import annotations

import logging

import requests
from fastapi import Request

from promptforms.errors import MediaUploadError, ServiceNotConfigured
from promptforms.schemas import UploadedMedia

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/upload"


class MediaUploader:
    """Uploads raw file bytes to Cloudinary and returns the hosted URL."""

    def __init__(self, cloud_name: str, upload_preset: str, timeout: int = 60) -> None:
        self._cloud_name = cloud_name
        self._upload_preset = upload_preset
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._cloud_name and self._upload_preset)

    def upload(self, filename: str, content: bytes, content_type: str | None = None) -> UploadedMedia:
        """
        Upload *content* and return its metadata.

        Raises:
            ServiceNotConfigured if cloud name or upload preset is missing.
            MediaUploadError if Cloudinary rejects the upload or is unreachable.
        """
        if not self.configured:
            raise ServiceNotConfigured("Cloudinary cloud name / upload preset not set")

        url = CLOUDINARY_UPLOAD_URL.format(cloud_name=self._cloud_name)
        try:
            resp = requests.post(
                url,
                data={"upload_preset": self._upload_preset},
                files={"file": (filename, content, content_type or "application/octet-stream")},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.exceptions.RequestException, ValueError) as exc:
            logger.error("Cloudinary upload of %s failed: %s", filename, exc)
            raise MediaUploadError("File upload failed") from exc

        secure_url = payload.get("secure_url")
        public_id = payload.get("public_id")
        if not secure_url or not public_id:
            logger.error("Cloudinary response missing secure_url/public_id for %s", filename)
            raise MediaUploadError("File upload failed")

        logger.info("Uploaded %s (%d bytes) -> %s", filename, len(content), public_id)
        return UploadedMedia(
            url=secure_url,
            public_id=public_id,
            file_name=filename,
            file_size=len(content),
            mime_type=content_type,
        )


def get_media_uploader(request: Request) -> MediaUploader:
    """FastAPI dependency returning the app-wide uploader."""
    return request.app.state.media_uploader
