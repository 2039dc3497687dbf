"""
Error taxonomy for the PromptForms backend.

Gate failures are ``HTTPException`` subclasses so a dependency can raise
them and terminate the request pipeline directly.  Domain errors are plain
exceptions that routers translate to a status code.
"""

from fastapi import HTTPException


# ── Gate failures ────────────────────────────────────────────────────────────

class Unauthenticated(HTTPException):
    """No session proof, or one that failed verification.

    The detail is identical for every cause (absent, malformed, tampered,
    expired) so clients learn nothing about token validation.
    """

    def __init__(self) -> None:
        super().__init__(status_code=401, detail="Not authenticated")


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Unauthorized: You can only modify your own forms") -> None:
        super().__init__(status_code=403, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Form not found") -> None:
        super().__init__(status_code=404, detail=detail)


# ── Domain errors ────────────────────────────────────────────────────────────

class InvalidToken(Exception):
    """Session token failed signature, structure, or expiry checks."""


class HashingError(Exception):
    """bcrypt could not produce a hash (randomness or resource failure)."""


class DuplicateEmailError(ValueError):
    pass


class FormGenerationError(Exception):
    """The AI service could not turn a prompt into a valid form schema."""


class ServiceNotConfigured(Exception):
    """A third-party integration is missing its credentials."""


class MediaUploadError(Exception):
    pass
