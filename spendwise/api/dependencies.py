"""
Request dependencies.

Components are read from the application state, which the lifespan
handler fills once at startup.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Request

from spendwise.models.user import User
from spendwise.orchestrator import AppComponents
from spendwise.services.auth import extract_token


def get_components(request: Request) -> AppComponents:
    """The components built at startup."""
    return request.app.state.components


def get_correlation_id(request: Request) -> UUID:
    """Correlation ID assigned to this request by the middleware."""
    return request.state.correlation_id


# PUBLIC_INTERFACE
async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    components: AppComponents = Depends(get_components),
) -> User:
    """
    Resolve the Authorization header to the calling user.

    Accepts "Bearer <token>" or the bare token. Raises
    UnauthenticatedError (401) when it can't.
    """
    token = extract_token(authorization)
    return await components.credentials.authenticate(token)
