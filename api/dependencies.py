"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from core.sessions import SessionStore


def get_session_store(request: Request) -> SessionStore:
    """The Redis session store opened in the application lifespan."""
    return request.app.state.session_store
