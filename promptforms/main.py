"""
FastAPI application assembly for the PromptForms API.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promptforms.config import Settings, get_settings
from promptforms.services.form_generator import FormGenerator
from promptforms.services.media_uploader import MediaUploader

# Import routers
from promptforms.routers import auth, forms, health, submissions, uploads

logger = logging.getLogger(__name__)


def _check_signing_secret(settings: Settings) -> None:
    """Flag a missing or fallback JWT secret; tokens are forgeable with it."""
    if not settings.uses_default_secret:
        return
    if settings.is_production:
        logger.error(
            "JWT_SECRET_KEY is unset or uses the built-in fallback in production. "
            "Anyone who knows the fallback can forge session tokens."
        )
    else:
        logger.warning("JWT_SECRET_KEY is unset; using the insecure development fallback")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    settings = get_settings()

    # ---- Singleton services ----
    app.state.settings = settings
    app.state.form_generator = FormGenerator(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
    )
    app.state.media_uploader = MediaUploader(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        upload_preset=settings.CLOUDINARY_UPLOAD_PRESET,
    )

    logger.info("PromptForms API starting up")
    logger.info("  ENVIRONMENT      = %s", settings.ENVIRONMENT)
    logger.info("  GEMINI_MODEL     = %s", settings.GEMINI_MODEL)
    logger.info("  GEMINI_API_KEY   = %s", "set" if settings.GEMINI_API_KEY else "MISSING")
    logger.info("  CLOUDINARY       = %s", settings.CLOUDINARY_CLOUD_NAME or "MISSING")
    logger.info("  MAX_UPLOAD_SIZE  = %d MB", settings.MAX_UPLOAD_SIZE_MB)
    logger.info("  ALLOWED_ORIGINS  = %s", settings.ALLOWED_ORIGINS)
    _check_signing_secret(settings)

    yield  # Application is running

    logger.info("PromptForms API shutting down")


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="PromptForms API",
        description="Generate shareable web forms from natural-language prompts",
        version="1.0.0",
        lifespan=lifespan,
    )

    # ---- CORS ----
    # Cookies are credentials, so origins must be explicit (no "*").
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o for o in settings.ALLOWED_ORIGINS if o != "*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept"],
        expose_headers=["Set-Cookie"],
    )

    # ---- Routers ----
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(forms.router)
    app.include_router(submissions.router)
    app.include_router(uploads.router)

    return app


# Module-level app instance for uvicorn
app = create_app()
