"""
Public submission endpoint used by the rendered form page.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from promptforms.db.audit import log_submission_received
from promptforms.db.connection import get_db_session
from promptforms.db.stores import FormStore
from promptforms.errors import NotFound
from promptforms.rate_limit import get_client_ip
from promptforms.routers.forms import submission_response
from promptforms.schemas import SubmissionCreatedResponse, SubmissionCreateRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/submissions", tags=["submissions"])


@router.post("", response_model=SubmissionCreatedResponse, status_code=201)
def create_submission(
    body: SubmissionCreateRequest,
    request: Request,
    db: Session = Depends(get_db_session),
) -> SubmissionCreatedResponse:
    """
    Save answers plus metadata of files already uploaded via ``/api/uploads``.
    """
    if not body.form_id or body.data is None:
        raise HTTPException(status_code=400, detail="Form ID and data are required")

    store = FormStore(db)
    form = store.find_by_id(body.form_id)
    if form is None:
        raise NotFound()

    files = [group.model_dump(by_alias=True) for group in body.uploaded_files]
    submission = store.add_submission(form, body.data, files)
    log_submission_received(db, form_id=form.id, submission_id=submission.id,
                            ip=get_client_ip(request))
    logger.info("Stored submission %s for form %s (%d file groups)",
                submission.id, form.id, len(files))

    return SubmissionCreatedResponse(
        message="Submission saved successfully",
        submission=submission_response(submission),
    )
