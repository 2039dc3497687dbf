"""
Audit trail for account and form events.

Rows are added to the caller's session and committed with the rest of the
request's work, so a rolled-back request leaves no audit row behind.
"""

import uuid
from typing import Any, Optional

from sqlalchemy.orm import Session

from promptforms.db.models import AuditLog

# Stored prompts are cut to this length.
MAX_PROMPT_CHARS = 500


class Action:
    REGISTER = "user.register"
    LOGIN = "user.login"
    LOGOUT = "user.logout"
    FORM_GENERATED = "form.generated"
    FORM_UPDATED = "form.updated"
    FORM_DELETED = "form.deleted"
    SUBMISSION_RECEIVED = "submission.received"


def record(
    db: Session,
    action: str,
    *,
    user_id: Optional[uuid.UUID] = None,
    resource: Optional[tuple[str, Any]] = None,
    details: Optional[dict[str, Any]] = None,
    ip: Optional[str] = None,
) -> AuditLog:
    """Add one audit row. *resource* is a ``(type, id)`` pair."""
    resource_type, resource_id = resource if resource else (None, None)
    entry = AuditLog(
        user_id=user_id,
        action_type=action,
        action_details=details,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
        ip_address=ip,
    )
    db.add(entry)
    return entry


# ── Accounts ─────────────────────────────────────────────────────────────────

def log_register(db: Session, user_id: uuid.UUID, ip: Optional[str] = None) -> AuditLog:
    return record(db, Action.REGISTER, user_id=user_id, resource=("user", user_id), ip=ip)


def log_login(db: Session, user_id: uuid.UUID, ip: Optional[str] = None) -> AuditLog:
    return record(db, Action.LOGIN, user_id=user_id, resource=("user", user_id), ip=ip)


def log_logout(db: Session, user_id: uuid.UUID) -> AuditLog:
    return record(db, Action.LOGOUT, user_id=user_id, resource=("user", user_id))


# ── Forms ────────────────────────────────────────────────────────────────────

def log_form_generated(
    db: Session, user_id: uuid.UUID, form_id: uuid.UUID, prompt: str,
) -> AuditLog:
    return record(db, Action.FORM_GENERATED, user_id=user_id, resource=("form", form_id),
                  details={"prompt": prompt[:MAX_PROMPT_CHARS]})


def log_form_updated(
    db: Session, user_id: uuid.UUID, form_id: uuid.UUID, fields: list[str],
) -> AuditLog:
    return record(db, Action.FORM_UPDATED, user_id=user_id, resource=("form", form_id),
                  details={"fields": fields})


def log_form_deleted(db: Session, user_id: uuid.UUID, form_id: uuid.UUID) -> AuditLog:
    return record(db, Action.FORM_DELETED, user_id=user_id, resource=("form", form_id))


def log_submission_received(
    db: Session, form_id: uuid.UUID, submission_id: uuid.UUID, ip: Optional[str] = None,
) -> AuditLog:
    # Respondents are anonymous.
    return record(db, Action.SUBMISSION_RECEIVED, resource=("submission", submission_id),
                  details={"form_id": str(form_id)}, ip=ip)
