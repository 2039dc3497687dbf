"""
Session transport: binds a session token to the ``auth_token`` cookie.

Wire contract::

    auth_token=<jwt>; HttpOnly; Max-Age=604800; Path=/; SameSite=Lax
    auth_token=<jwt>; HttpOnly; Max-Age=604800; Path=/; SameSite=None; Secure   (production)

Max-Age is JWT_EXPIRY_DAYS in seconds (604800 by default).
"""

from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from promptforms.config import Settings

COOKIE_NAME = "auth_token"
COOKIE_PATH = "/"
SECONDS_PER_DAY = 24 * 60 * 60


def cookie_settings(settings: Settings) -> dict:
    """Attributes shared by set and clear; a mismatch leaves the cookie in place."""
    return {
        "path": COOKIE_PATH,
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "None" if settings.is_production else "Lax",
    }


def cookie_max_age(settings: Settings) -> int:
    """Cookie lifetime in seconds; always equal to the token lifetime."""
    return settings.JWT_EXPIRY_DAYS * SECONDS_PER_DAY


def attach_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Set (or overwrite) the session cookie on *response*."""
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=cookie_max_age(settings),
        **cookie_settings(settings),
    )


def extract_session_token(request: Request) -> Optional[str]:
    """Return the session token from the request cookies, or None when absent."""
    token = request.cookies.get(COOKIE_NAME)
    return token or None


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Tell the client to drop the session cookie."""
    response.delete_cookie(key=COOKIE_NAME, **cookie_settings(settings))
