"""Login and logout."""

import logging
from typing import Optional

from core.sessions import SessionData, SessionStore
from core.validation import raise_for_failures, validate_login
from api.services.users import authenticate
from database.storage import users as user_storage

logger = logging.getLogger(__name__)


async def login(
    store: SessionStore,
    tenant_id: Optional[str],
    email: Optional[str],
    password: Optional[str],
    totp: Optional[str],
) -> str:
    """
    Validate the credentials and open a server-side session.

    Returns:
        The new session id, to be signed into the session cookie
    """
    raise_for_failures(validate_login(tenant_id, email, password, totp))

    user = await authenticate(tenant_id, password, totp, email=email)
    session_id = await store.create(
        SessionData(user_id=user.id, tenant_id=user.tenant_id, email=user.email)
    )
    await user_storage.record_login(user.id, user.tenant_id)

    logger.info("SESSION-CREATED", extra={"session_id": session_id})
    logger.info("USER-AUTHENTICATED", extra={"user_id": user.id, "tenant_id": user.tenant_id})
    return session_id


async def logout(
    store: SessionStore, session_id: Optional[str], session: Optional[SessionData]
) -> None:
    """Delete the session. Logging out twice is not an error."""
    deleted = bool(session_id) and await store.delete(session_id)
    if deleted and session is not None:
        logger.info(
            "SESSION-DELETED", extra={"user_id": session.user_id, "tenant_id": session.tenant_id}
        )
    else:
        logger.warning("SESSION-ALREADY-DELETED", extra={"session_id": session_id})
