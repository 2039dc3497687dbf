"""
Form endpoints: AI generation, owner listing, public view, public
submission, owner-only update / delete / submission review.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from promptforms.auth import AuthContext, get_auth_context
from promptforms.db.audit import (
    log_form_deleted,
    log_form_generated,
    log_form_updated,
    log_submission_received,
)
from promptforms.db.connection import get_db_session
from promptforms.db.models import Form, Submission
from promptforms.db.stores import FormStore
from promptforms.errors import FormGenerationError, NotFound, ServiceNotConfigured
from promptforms.ownership import get_owned_form
from promptforms.rate_limit import get_client_ip
from promptforms.schemas import (
    FormListResponse,
    FormResponse,
    FormSummary,
    GenerateFormRequest,
    MessageResponse,
    PublicFormResponse,
    SubmissionListResponse,
    SubmissionResponse,
    UpdateFormRequest,
)
from promptforms.services.form_generator import FormGenerator, get_form_generator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/forms", tags=["forms"])


def _form_response(form: Form) -> FormResponse:
    return FormResponse(
        id=str(form.id),
        title=form.title,
        description=form.description,
        owner=str(form.owner_id),
        form_schema=form.schema_json,
        created_at=form.created_at,
        updated_at=form.updated_at,
    )


def submission_response(submission: Submission) -> SubmissionResponse:
    return SubmissionResponse(
        id=str(submission.id),
        form_id=str(submission.form_id),
        data=submission.data,
        files=submission.files or [],
        submitted_at=submission.submitted_at,
    )


# ── Owner endpoints ──────────────────────────────────────────────────────────

@router.post("/generate", response_model=FormResponse)
async def generate_form(
    body: GenerateFormRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db_session),
    generator: FormGenerator = Depends(get_form_generator),
) -> FormResponse:
    """Turn a natural-language prompt into a stored form owned by the caller."""
    prompt = (body.prompt or "").strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    try:
        schema = await generator.generate(prompt, body.title)
    except ServiceNotConfigured:
        logger.error("Form generation requested but GEMINI_API_KEY is not set")
        raise HTTPException(status_code=503, detail="AI service is not configured")
    except FormGenerationError as exc:
        logger.warning("Form generation failed for user %s: %s", auth.user_id, exc)
        raise HTTPException(
            status_code=502,
            detail="AI service unavailable. Please try again later.",
        )

    form = FormStore(db).create(
        owner_id=auth.user_id,
        title=schema.title,
        description=schema.description,
        schema=schema.model_dump(exclude_none=True),
    )
    log_form_generated(db, user_id=auth.user_id, form_id=form.id, prompt=prompt)
    logger.info("User %s generated form %s", auth.user_id, form.id)

    return _form_response(form)


@router.get("", response_model=FormListResponse)
def list_user_forms(
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db_session),
) -> FormListResponse:
    """List the caller's forms, newest first."""
    rows = FormStore(db).list_for_owner(auth.user_id)
    return FormListResponse(
        forms=[
            FormSummary(
                id=str(form.id),
                title=form.title,
                form_schema=form.schema_json,
                submission_count=count,
                created_at=form.created_at,
            )
            for form, count in rows
        ]
    )


@router.put("/{form_id}", response_model=FormResponse)
def update_form(
    body: UpdateFormRequest,
    auth: AuthContext = Depends(get_auth_context),
    form: Form = Depends(get_owned_form),
    db: Session = Depends(get_db_session),
) -> FormResponse:
    """Edit title, description or schema. Ownership never changes."""
    changed = body.model_fields_set
    if "title" in changed and body.title is not None:
        form.title = body.title
    if "description" in changed:
        form.description = body.description
    if "form_schema" in changed and body.form_schema is not None:
        form.schema_json = body.form_schema.model_dump(exclude_none=True)

    db.flush()
    log_form_updated(db, user_id=auth.user_id, form_id=form.id, fields=sorted(changed))

    return _form_response(form)


@router.delete("/{form_id}", response_model=MessageResponse)
def delete_form(
    auth: AuthContext = Depends(get_auth_context),
    form: Form = Depends(get_owned_form),
    db: Session = Depends(get_db_session),
) -> MessageResponse:
    """Delete a form and all of its submissions."""
    form_id = form.id
    FormStore(db).delete(form)
    log_form_deleted(db, user_id=auth.user_id, form_id=form_id)
    logger.info("User %s deleted form %s", auth.user_id, form_id)
    return MessageResponse(message="Form deleted successfully")


@router.get("/{form_id}/submissions", response_model=SubmissionListResponse)
def list_form_submissions(
    form: Form = Depends(get_owned_form),
    db: Session = Depends(get_db_session),
) -> SubmissionListResponse:
    """Return every submission for an owned form, newest first."""
    submissions = FormStore(db).list_submissions(form)
    return SubmissionListResponse(
        submissions=[submission_response(s) for s in submissions]
    )


# ── Public endpoints ─────────────────────────────────────────────────────────

@router.get("/{form_id}", response_model=PublicFormResponse)
def get_form(
    form_id: str,
    db: Session = Depends(get_db_session),
) -> PublicFormResponse:
    """Return a form definition for rendering. Submissions are not included."""
    form = FormStore(db).find_by_id(form_id)
    if form is None:
        raise NotFound()
    return PublicFormResponse(
        id=str(form.id),
        title=form.title,
        description=form.description,
        form_schema=form.schema_json,
        created_at=form.created_at,
    )


@router.post("/{form_id}/submit", response_model=MessageResponse)
def submit_form(
    form_id: str,
    request: Request,
    data: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db_session),
) -> MessageResponse:
    """Store the request body as a submission to the form."""
    store = FormStore(db)
    form = store.find_by_id(form_id)
    if form is None:
        raise NotFound()

    submission = store.add_submission(form, data)
    log_submission_received(db, form_id=form.id, submission_id=submission.id,
                            ip=get_client_ip(request))
    return MessageResponse(message="Submission saved successfully")
