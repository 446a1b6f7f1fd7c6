"""
Session endpoints.

Logging in stores a server-side session in Redis and sets a signed,
HttpOnly cookie carrying its id. Logging out deletes both.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import get_session_store
from api.schemas.common import ErrorResponse
from api.schemas.sessions import LoginRequest
from api.services import sessions as session_service
from core.config import settings
from core.middleware.authentication import get_current_session, get_current_session_id
from core.security import create_session_token
from core.sessions import SessionData, SessionStore

router = APIRouter(prefix="/session", tags=["sessions"])


@router.post(
    "",
    summary="Log In",
    description="Authenticate with email, password and TOTP code.",
    responses={401: {"model": ErrorResponse}},
)
async def login(
    body: LoginRequest,
    store: SessionStore = Depends(get_session_store),
):
    session_id = await session_service.login(
        store, body.tenant_id, body.email, body.password, body.totp
    )
    response = Response(status_code=status.HTTP_200_OK)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(session_id),
        max_age=settings.session_max_age_seconds,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return response


@router.delete(
    "",
    summary="Log Out",
    description="Delete the current session. Succeeds when already logged out.",
)
async def logout(
    store: SessionStore = Depends(get_session_store),
    session_id: Optional[str] = Depends(get_current_session_id),
    session: Optional[SessionData] = Depends(get_current_session),
):
    await session_service.logout(store, session_id, session)
    response = Response(status_code=status.HTTP_200_OK)
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return response
