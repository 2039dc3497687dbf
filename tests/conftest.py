"""
Shared pytest fixtures for the PromptForms test suite.

Uses an in-memory SQLite database shared across threads (``StaticPool``)
so the FastAPI ``TestClient`` and direct-session tests see the same data.
"""

import uuid
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from promptforms.config import Settings, get_settings
from promptforms.db.connection import get_db_session
from promptforms.db.models import Base, User
from promptforms.main import create_app
from promptforms.rate_limit import login_limiter, register_limiter
from promptforms.schemas import FormField, FormSchema, UploadedMedia
from promptforms.services.form_generator import get_form_generator
from promptforms.services.media_uploader import get_media_uploader

TEST_SECRET = "test-secret-key-for-tests-only-0123456789abcdef"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    """In-memory SQLite session for unit tests."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture()
def settings():
    return Settings(
        _env_file=None,
        ENVIRONMENT="development",
        JWT_SECRET_KEY=TEST_SECRET,
        GEMINI_API_KEY="",
        CLOUDINARY_CLOUD_NAME="",
        CLOUDINARY_UPLOAD_PRESET="",
        MAX_UPLOAD_SIZE_MB=1,
    )


@pytest.fixture()
def test_user(db_session):
    """Create and return a test user in the in-memory DB."""
    from promptforms.auth_utils import hash_password

    user = User(
        id=uuid.uuid4(),
        email="test@example.com",
        password_hash=hash_password("TestPass123!"),
        name="Test User",
    )
    db_session.add(user)
    db_session.flush()
    return user


# ── Fakes for third-party services ───────────────────────────────────────────

class FakeFormGenerator:
    """Stands in for Gemini; returns a fixed schema."""

    configured = True

    def __init__(self) -> None:
        self.calls: list[tuple[str, Optional[str]]] = []
        self.error: Optional[Exception] = None
        self.schema = FormSchema(
            title="Contact Form",
            description="Get in touch",
            fields=[
                FormField(name="name", label="Full Name", type="text", required=True),
                FormField(name="email", label="Email Address", type="email", required=True),
                FormField(name="photo", label="Photo", type="file", accept="image/*"),
            ],
        )

    async def generate(self, prompt: str, title: Optional[str] = None) -> FormSchema:
        self.calls.append((prompt, title))
        if self.error is not None:
            raise self.error
        schema = self.schema.model_copy(deep=True)
        if title:
            schema.title = title
        return schema


class FakeMediaUploader:
    configured = True

    def __init__(self) -> None:
        self.uploads: list[tuple[str, bytes, Optional[str]]] = []
        self.error: Optional[Exception] = None

    def upload(self, filename: str, content: bytes, content_type: Optional[str] = None) -> UploadedMedia:
        self.uploads.append((filename, content, content_type))
        if self.error is not None:
            raise self.error
        return UploadedMedia(
            url=f"https://res.cloudinary.com/demo/{filename}",
            public_id=f"demo/{filename}",
            file_name=filename,
            file_size=len(content),
            mime_type=content_type,
        )


@pytest.fixture()
def form_generator():
    return FakeFormGenerator()


@pytest.fixture()
def media_uploader():
    return FakeMediaUploader()


# ── Application fixtures ─────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_rate_limiters():
    login_limiter.reset()
    register_limiter.reset()
    yield
    login_limiter.reset()
    register_limiter.reset()


@pytest.fixture()
def app(engine, settings, form_generator, media_uploader):
    application = create_app()
    factory = sessionmaker(bind=engine, expire_on_commit=False)

    def override_db_session():
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    application.dependency_overrides[get_db_session] = override_db_session
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_form_generator] = lambda: form_generator
    application.dependency_overrides[get_media_uploader] = lambda: media_uploader
    return application


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def make_client(app):
    """Factory for extra clients, each with its own cookie jar."""
    return lambda: TestClient(app)


def register(client: TestClient, email: str, password: str = "p1", name: Optional[str] = None):
    body = {"email": email, "password": password}
    if name is not None:
        body["name"] = name
    return client.post("/api/auth/register", json=body)


def create_form(client: TestClient, prompt: str = "a contact form", title: Optional[str] = None) -> dict:
    body = {"prompt": prompt}
    if title is not None:
        body["title"] = title
    resp = client.post("/api/forms/generate", json=body)
    assert resp.status_code == 200, resp.text
    return resp.json()

