"""
Liveness and integration health endpoints. Public.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from promptforms.db.connection import get_db_session
from promptforms.schemas import HealthResponse
from promptforms.services.form_generator import FormGenerator, get_form_generator
from promptforms.services.media_uploader import MediaUploader, get_media_uploader

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "PromptForms API is running"


@router.get("/api/health", response_model=HealthResponse)
def health_check(
    db: Session = Depends(get_db_session),
    generator: FormGenerator = Depends(get_form_generator),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> HealthResponse:
    """
    Return service health: database reachability and whether the AI and
    media integrations have credentials.
    """
    database = True
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        db.rollback()
        database = False

    return HealthResponse(
        status="ok" if database else "degraded",
        database=database,
        gemini_configured=generator.configured,
        media_configured=uploader.configured,
    )
