"""
Authentication endpoints: register, login, logout, session status.

The session token travels only in the ``auth_token`` HttpOnly cookie; it
is never returned in a response body.

Rate-limited: register (5/min per IP), login (10/min per IP).
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from promptforms.auth import (
    AuthContext,
    get_auth_context,
    get_current_user,
    get_optional_auth_context,
)
from promptforms.auth_utils import (
    MAX_PASSWORD_BYTES,
    authenticate_user,
    create_jwt,
    register_user,
)
from promptforms.config import Settings, get_settings
from promptforms.db.audit import log_login, log_logout, log_register
from promptforms.db.connection import get_db_session
from promptforms.db.models import User
from promptforms.errors import DuplicateEmailError, HashingError
from promptforms.rate_limit import (
    get_client_ip,
    login_limiter,
    rate_limited,
    register_limiter,
)
from promptforms.schemas import CamelModel, MessageResponse
from promptforms.session_cookie import attach_session_cookie, clear_session_cookie

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


# ── Request / response schemas ───────────────────────────────────────────────

class RegisterRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)
    name: Optional[str] = Field(default=None, max_length=255)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class UserOut(CamelModel):
    id: str
    email: str
    name: Optional[str] = None


class RegisterResponse(CamelModel):
    user: UserOut


class LoginResponse(CamelModel):
    message: str
    user_id: str


class StatusResponse(CamelModel):
    message: str
    user_id: str
    username: Optional[str] = None


# ── Endpoints ────────────────────────────────────────────────────────────────

@router.post(
    "/register",
    response_model=RegisterResponse,
    dependencies=[Depends(rate_limited(register_limiter))],
)
def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> RegisterResponse:
    """Create a new user account and start a session for it."""
    ip = get_client_ip(request)

    try:
        user = register_user(db, body.email, body.password, body.name)
    except DuplicateEmailError:
        raise HTTPException(status_code=400, detail="Email already exists")
    except HashingError:
        logger.exception("Password hashing failed during registration")
        raise HTTPException(status_code=500, detail="Registration failed")

    log_register(db, user_id=user.id, ip=ip)

    attach_session_cookie(response, create_jwt(str(user.id), settings), settings)

    return RegisterResponse(user=UserOut(id=str(user.id), email=user.email, name=user.name))


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(rate_limited(login_limiter))],
)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    """Authenticate with email/password and start a session."""
    ip = get_client_ip(request)

    user = authenticate_user(db, body.email, body.password)
    if user is None:
        # Same answer for unknown email and wrong password.
        raise HTTPException(status_code=400, detail="Invalid credentials")

    attach_session_cookie(response, create_jwt(str(user.id), settings), settings)

    log_login(db, user_id=user.id, ip=ip)
    logger.info("User %s logged in", user.id)

    return LoginResponse(message="Login successful", user_id=str(user.id))


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """
    Clear the session cookie.

    The token itself stays valid until it expires; there is no server-side
    session registry to revoke it from.
    """
    clear_session_cookie(response, settings)

    if auth is not None:
        log_logout(db, user_id=auth.user_id)

    return MessageResponse(message="Logout successful")


@router.get("/status", response_model=StatusResponse)
def check_auth_status(
    auth: AuthContext = Depends(get_auth_context),
    user: Optional[User] = Depends(get_current_user),
) -> StatusResponse:
    """Confirm the session cookie is valid and report whose it is."""
    return StatusResponse(
        message="Authenticated",
        user_id=str(auth.user_id),
        username=user.name if user else None,
    )
