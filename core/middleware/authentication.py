"""
Authentication middleware for resolving the session behind a request.

This middleware:
1. Reads the signed session cookie
2. Verifies its signature and expiry
3. Loads the server-side session from the session store
4. Puts the session (or None) into the request scope

Routes that need an authenticated user depend on
``require_authenticated_user``, which raises ``UnauthenticatedError``.
"""

import logging
from typing import Callable, Optional

from fastapi import Request

from core.config import settings
from core.errors import UnauthenticatedError
from core.security import verify_session_token
from core.sessions import SessionData, SessionStore

logger = logging.getLogger(__name__)

# Public endpoints that don't require authentication
PUBLIC_ENDPOINTS = [
    "/",
    "/health",
    "/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
]


def is_public_endpoint(path: str, method: str) -> bool:
    if path in PUBLIC_ENDPOINTS:
        return True
    # Applicants are not users: creating a job application is public
    if method == "POST" and "/job-applications/" in path and "/users/" not in path:
        return True
    return False


class AuthenticationMiddleware:
    """
    Resolves the session cookie into ``scope["auth_session"]``.

    Invalid, expired and deleted sessions all resolve to None; rejecting
    the request is left to the route dependencies so errors are rendered
    by the application's exception handlers.
    """

    def __init__(self, app: Callable, cookie_name: Optional[str] = None):
        self.app = app
        self.cookie_name = cookie_name or settings.session_cookie_name

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        scope["auth_session"] = None
        scope["auth_session_id"] = None

        if not is_public_endpoint(scope["path"], scope["method"]):
            request = Request(scope)
            token = request.cookies.get(self.cookie_name)
            session_id = verify_session_token(token) if token else None
            if session_id:
                store: SessionStore = scope["app"].state.session_store
                scope["auth_session_id"] = session_id
                scope["auth_session"] = await store.get(session_id)

        await self.app(scope, receive, send)


def get_current_session(request: Request) -> Optional[SessionData]:
    return request.scope.get("auth_session")


def get_current_session_id(request: Request) -> Optional[str]:
    return request.scope.get("auth_session_id")


def require_authenticated_user(request: Request) -> SessionData:
    """
    Get the authenticated session from the request scope.

    Raises:
        UnauthenticatedError: If there is no valid session
    """
    session = get_current_session(request)
    if session is None:
        raise UnauthenticatedError()
    return session
