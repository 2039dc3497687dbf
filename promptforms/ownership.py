"""
Resource ownership gate.

Runs after the authentication gate.  Loads the form named in the path,
rejects callers who do not own it, and hands the loaded form to the
handler so it is not fetched twice.
"""

import logging
from typing import Callable, Optional, Protocol, TypeVar

from fastapi import Depends
from sqlalchemy.orm import Session

from promptforms.auth import AuthContext, get_auth_context
from promptforms.db.connection import get_db_session
from promptforms.db.models import Form
from promptforms.db.stores import FormStore
from promptforms.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)


class OwnedResource(Protocol):
    owner_id: object


R = TypeVar("R", bound=OwnedResource)


def require_owner(
    resource_id: str,
    auth: AuthContext,
    find_by_id: Callable[[str], Optional[R]],
) -> R:
    """
    Return the resource identified by *resource_id* if *auth* owns it.

    Raises:
        NotFound if the store has no such resource.
        Forbidden if it is owned by someone else.
    """
    resource = find_by_id(resource_id)
    if resource is None:
        raise NotFound()

    if resource.owner_id != auth.user_id:
        logger.warning(
            "User %s denied access to resource %s", auth.user_id, resource_id
        )
        raise Forbidden()

    return resource


def get_owned_form(
    form_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db_session),
) -> Form:
    """FastAPI dependency: the ``{form_id}`` form, guaranteed owned by the caller."""
    return require_owner(form_id, auth, FormStore(db).find_by_id)
