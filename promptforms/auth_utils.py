"""
PromptForms Authentication Utilities

Core functions for password hashing (bcrypt), JWT session-token issuance
and verification, user registration and authentication.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from sqlalchemy.orm import Session

from promptforms.config import Settings
from promptforms.db.models import User
from promptforms.db.stores import UserStore
from promptforms.errors import DuplicateEmailError, HashingError, InvalidToken

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes and recent releases reject longer input.
MAX_PASSWORD_BYTES = 72


# ── Password helpers ─────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt with 10 rounds."""
    try:
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    except (ValueError, OSError) as exc:
        raise HashingError("Password hashing failed") from exc
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plain-text password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # Malformed stored hash or over-long input never matches.
        logger.warning("bcrypt rejected a password check input")
        return False


# ── JWT helpers ──────────────────────────────────────────────────────────────

def create_jwt(user_id: str, settings: Settings, now: Optional[datetime] = None) -> str:
    """Create a signed JWT for *user_id* expiring JWT_EXPIRY_DAYS after *now*."""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.JWT_EXPIRY_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str, settings: Settings) -> str:
    """
    Verify a JWT's signature and expiry and return the user id it carries.

    Raises:
        InvalidToken for any malformed, tampered or expired token.  The
        cause is logged at debug level only.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.InvalidTokenError as exc:
        logger.debug("Token rejected: %s", type(exc).__name__)
        raise InvalidToken() from exc

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise InvalidToken()
    return user_id


# ── User registration & authentication ───────────────────────────────────────

def register_user(
    db: Session,
    email: str,
    password: str,
    name: Optional[str] = None,
) -> User:
    """Register a new user account. Raises DuplicateEmailError if email is taken."""
    store = UserStore(db)
    email = email.strip()

    if store.find_by_email(email) is not None:
        raise DuplicateEmailError("Email already exists")

    user = store.create(
        email=email,
        password_hash=hash_password(password),
        name=name.strip() if name else None,
    )
    logger.info("Registered user %s", user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Validate email/password pair. Returns User or None."""
    user = UserStore(db).find_by_email(email.strip())
    if user is None:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = datetime.now(timezone.utc)
    db.flush()
    return user
