"""API dependencies for the application context and bearer authentication."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from typing import Optional

from api.errors import to_http_exception
from models.user import UserInDB
from services.context import AppContext
from services.errors import TaskFlowError, UnauthenticatedError


bearer_scheme = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AppContext:
    """The AppContext built by the application lifespan."""
    return request.app.state.context


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    context: AppContext = Depends(get_context),
) -> UserInDB:
    """
    Resolve ``Authorization: Bearer <token>`` to a live user.

    Absent or malformed headers fail as unauthenticated, an expired token as
    TOKEN_EXPIRED (so the client refreshes), anything else as INVALID_TOKEN.
    """
    try:
        if credentials is None or not credentials.credentials.strip():
            raise UnauthenticatedError()
        return await context.auth.authenticate(credentials.credentials.strip())
    except TaskFlowError as e:
        raise to_http_exception(e) from e
