"""
Utility functions and dependencies for endpoint operations.
"""
import uuid
from typing import Optional

from fastapi import Depends, Query
from sqlmodel import Session

from app.core.database import get_session
from app.core.exceptions import AuthenticationError
from app.models.models import User


async def get_current_user(
    user_id: Optional[uuid.UUID] = Query(None, description="Id of the signed-in user"),
    session: Session = Depends(get_session)
) -> User:
    """
    Resolve the calling user from the ``user_id`` query parameter.

    Raises:
        AuthenticationError: If no user id is given or the user does not exist
    """
    if user_id is None:
        raise AuthenticationError("Authentication required")
    user = session.get(User, user_id)
    if not user:
        raise AuthenticationError("Authentication required")
    return user
