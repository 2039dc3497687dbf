"""
Backend configuration using pydantic-settings.

All settings can be overridden via environment variables or a .env file.
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root is one level above the package: promptforms/config.py -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Used only when JWT_SECRET_KEY is unset. Startup logs it as a security gap.
DEFAULT_JWT_SECRET = "supersecret"


class Settings(BaseSettings):
    """Backend configuration for the PromptForms API server."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------- Deployment ----------
    ENVIRONMENT: str = "development"  # "production" enables Secure/SameSite=None cookies

    # ---------- JWT ----------
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_DAYS: int = 7

    # ---------- Google Gemini API ----------
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # ---------- Cloudinary ----------
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_UPLOAD_PRESET: str = ""

    # ---------- Limits ----------
    MAX_UPLOAD_SIZE_MB: int = 10

    # ---------- CORS ----------
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # ---------- Database ----------
    DATABASE_URL: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "promptforms"
    DB_PASSWORD: str = "promptforms"
    DB_NAME: str = "promptforms"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def uses_default_secret(self) -> bool:
        return not self.JWT_SECRET_KEY or self.JWT_SECRET_KEY == DEFAULT_JWT_SECRET

    @property
    def database_url(self) -> str:
        """Return DATABASE_URL, or build a PostgreSQL connection string for psycopg2."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


def get_settings() -> Settings:
    """Return a Settings instance."""
    return Settings()
