"""
Credential and form stores.

Thin lookups over a SQLAlchemy ``Session``; the auth core only ever sees
these narrow interfaces, never query shapes.
"""

import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from promptforms.db.models import Form, Submission, User
from promptforms.errors import DuplicateEmailError


def parse_id(raw: str | uuid.UUID | None) -> Optional[uuid.UUID]:
    """Parse an identifier from a path or token. Returns None if malformed."""
    if isinstance(raw, uuid.UUID):
        return raw
    if not raw:
        return None
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


class UserStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.email == email)).first()

    def find_by_id(self, user_id: str | uuid.UUID) -> Optional[User]:
        parsed = parse_id(user_id)
        if parsed is None:
            return None
        return self.db.get(User, parsed)

    def create(self, email: str, password_hash: str, name: Optional[str] = None) -> User:
        user = User(email=email, password_hash=password_hash, name=name)
        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError as exc:
            # A concurrent registration won the unique email index.
            self.db.rollback()
            raise DuplicateEmailError("Email already exists") from exc
        return user


class FormStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, form_id: str | uuid.UUID) -> Optional[Form]:
        parsed = parse_id(form_id)
        if parsed is None:
            return None
        return self.db.get(Form, parsed)

    def list_for_owner(self, owner_id: uuid.UUID) -> list[tuple[Form, int]]:
        """Return ``(form, submission_count)`` pairs, newest form first."""
        counts = (
            select(Submission.form_id, func.count(Submission.id).label("n"))
            .group_by(Submission.form_id)
            .subquery()
        )
        rows = self.db.execute(
            select(Form, func.coalesce(counts.c.n, 0))
            .outerjoin(counts, counts.c.form_id == Form.id)
            .where(Form.owner_id == owner_id)
            .order_by(Form.created_at.desc())
        ).all()
        return [(form, int(n)) for form, n in rows]

    def create(
        self,
        owner_id: uuid.UUID,
        title: str,
        description: Optional[str],
        schema: dict,
    ) -> Form:
        form = Form(owner_id=owner_id, title=title, description=description, schema_json=schema)
        self.db.add(form)
        self.db.flush()
        return form

    def add_submission(
        self,
        form: Form,
        data: dict,
        files: Optional[list] = None,
    ) -> Submission:
        submission = Submission(form_id=form.id, data=data, files=files or [])
        self.db.add(submission)
        self.db.flush()
        return submission

    def list_submissions(self, form: Form) -> list[Submission]:
        return list(
            self.db.scalars(
                select(Submission)
                .where(Submission.form_id == form.id)
                .order_by(Submission.submitted_at.desc())
            )
        )

    def delete(self, form: Form) -> None:
        self.db.delete(form)
        self.db.flush()
