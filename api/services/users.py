"""User, position and position assignment service functions."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from core.errors import UnauthenticatedError
from core.security import generate_default_credentials, verify_credentials
from core.validation import (
    parse_iso_date,
    raise_for_failures,
    validate_position,
    validate_position_assignment,
    validate_user,
)
from database.records import UserRecord
from database.storage import users as user_storage

logger = logging.getLogger(__name__)


def serialize_user(user: UserRecord) -> Dict[str, Any]:
    """Public view of a user. Credentials never leave the service."""
    return {
        "id": user.id,
        "tenantId": user.tenant_id,
        "email": user.email,
        "lastLogin": user.last_login.isoformat() if user.last_login else None,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
    }


async def create_user(user_id: str, tenant_id: str, email: Optional[str]) -> Dict[str, str]:
    """
    Create a user with generated default credentials.

    Returns the plaintext password and TOTP secret. They are not stored and
    cannot be retrieved again.
    """
    raise_for_failures(validate_user(user_id, tenant_id, email))

    credentials = generate_default_credentials()
    await user_storage.create_user(
        UserRecord(
            id=user_id,
            tenant_id=tenant_id,
            email=email,
            password=credentials.password_hash,
            totp_secret_key=credentials.totp_secret_key,
        )
    )
    logger.info("USER-CREATED", extra={"user_id": user_id, "tenant_id": tenant_id})
    return {"password": credentials.password, "totpSecretKey": credentials.totp_secret_key}


async def list_users(tenant_id: str, email: Optional[str] = None) -> List[Dict[str, Any]]:
    filter = UserRecord(tenant_id=tenant_id)
    if email is not None:
        filter = UserRecord(tenant_id=tenant_id, email=email)
    users = await user_storage.get_users(filter)
    return [serialize_user(user) for user in users]


async def authenticate(
    tenant_id: str,
    password: str,
    totp: str,
    email: Optional[str] = None,
    user_id: Optional[str] = None,
) -> UserRecord:
    """
    Look the user up by email or id and check the password and TOTP code.

    Raises:
        UnauthenticatedError: unknown user or wrong credentials
    """
    filter = UserRecord(tenant_id=tenant_id, email=email) if email else UserRecord(
        tenant_id=tenant_id, id=user_id
    )
    users = await user_storage.get_users(filter)
    if not users:
        raise UnauthenticatedError()
    user = users[0]
    if not verify_credentials(password, totp, user.password, user.totp_secret_key):
        raise UnauthenticatedError()
    return user


async def create_position(
    position_id: str,
    tenant_id: str,
    title: Optional[str],
    department_id: Optional[str],
    supervisor_position_ids: Optional[Sequence[str]] = None,
) -> None:
    raise_for_failures(
        validate_position(position_id, tenant_id, title, department_id, supervisor_position_ids)
    )
    await user_storage.create_position(
        position_id, tenant_id, title, department_id, supervisor_position_ids or ()
    )
    logger.info("POSITION-CREATED", extra={"position_id": position_id, "tenant_id": tenant_id})


async def create_position_assignment(
    tenant_id: str,
    position_id: str,
    user_id: str,
    start_date: Optional[str],
    end_date: Optional[str] = None,
) -> None:
    raise_for_failures(
        validate_position_assignment(tenant_id, position_id, user_id, start_date, end_date)
    )
    await user_storage.create_position_assignment(
        tenant_id,
        position_id,
        user_id,
        parse_iso_date(start_date),
        parse_iso_date(end_date) if end_date else None,
    )
    logger.info(
        "POSITION-ASSIGNMENT-CREATED",
        extra={"tenant_id": tenant_id, "position_id": position_id, "user_id": user_id},
    )
