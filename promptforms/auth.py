"""
FastAPI authentication dependencies.

The authentication gate reads the ``auth_token`` cookie, verifies the JWT
it carries and yields a typed ``AuthContext``.  Nothing is looked up in the
database: the token alone establishes identity.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from promptforms.auth_utils import decode_jwt
from promptforms.config import Settings, get_settings
from promptforms.db.connection import get_db_session
from promptforms.db.models import User
from promptforms.db.stores import UserStore, parse_id
from promptforms.errors import InvalidToken, Unauthenticated
from promptforms.session_cookie import COOKIE_NAME, extract_session_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Identity established for the current request."""

    user_id: uuid.UUID


def authenticate_request(request: Request, settings: Settings) -> AuthContext:
    """
    Run the authentication gate against *request*.

    Raises:
        Unauthenticated if the cookie is absent or its token fails
        verification.  Every cause produces the same response.
    """
    token = extract_session_token(request)
    if token is None:
        logger.info("No %s cookie on %s", COOKIE_NAME, request.url.path)
        raise Unauthenticated()

    try:
        raw_user_id = decode_jwt(token, settings)
    except InvalidToken:
        logger.info("Rejected session token on %s", request.url.path)
        raise Unauthenticated()

    user_id = parse_id(raw_user_id)
    if user_id is None:
        logger.warning("Signed token carries a malformed user id")
        raise Unauthenticated()

    return AuthContext(user_id=user_id)


def get_auth_context(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> AuthContext:
    """FastAPI dependency guarding a protected route."""
    return authenticate_request(request, settings)


def get_optional_auth_context(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Optional[AuthContext]:
    """Like ``get_auth_context`` but returns None instead of rejecting."""
    try:
        return authenticate_request(request, settings)
    except Unauthenticated:
        return None


def get_current_user(
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db_session),
) -> Optional[User]:
    """Load the authenticated user's record, or None if the account is gone."""
    return UserStore(db).find_by_id(auth.user_id)
