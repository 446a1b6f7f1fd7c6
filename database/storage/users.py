"""User accounts, positions and position assignments."""

import logging
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import insert, text
from sqlalchemy.ext.asyncio import AsyncConnection

from core.errors import InternalError
from database.engine import db_engine
from database.errors import translate_errors
from database.models import (
    UserAccount,
    Position,
    PositionAssignment,
    SubordinateSupervisorRelationship,
)
from database.query_builder import build_select, build_update
from database.records import UserRecord
from database.storage import fetch_records, execute_update, utcnow

logger = logging.getLogger(__name__)

# Users holding a position that supervises one of the user's current positions
_SUPERVISORS_QUERY = text(
    """
    SELECT DISTINCT supervisor_assignment.user_account_id
    FROM position_assignment AS subordinate_assignment
    JOIN subordinate_supervisor_relationship AS relationship
        ON relationship.subordinate_position_id = subordinate_assignment.position_id
    JOIN position_assignment AS supervisor_assignment
        ON supervisor_assignment.position_id = relationship.supervisor_position_id
        AND supervisor_assignment.tenant_id = subordinate_assignment.tenant_id
    WHERE subordinate_assignment.user_account_id = :user_id
        AND subordinate_assignment.tenant_id = :tenant_id
        AND subordinate_assignment.start_date <= CURRENT_DATE
        AND (subordinate_assignment.end_date IS NULL OR subordinate_assignment.end_date > CURRENT_DATE)
        AND supervisor_assignment.start_date <= CURRENT_DATE
        AND (supervisor_assignment.end_date IS NULL OR supervisor_assignment.end_date > CURRENT_DATE)
    """
)


async def insert_user(conn: AsyncConnection, user: UserRecord) -> None:
    with translate_errors("user"):
        await conn.execute(insert(UserAccount).values(**user.present()))


async def create_user(user: UserRecord) -> None:
    with translate_errors("user"):
        async with db_engine.begin() as conn:
            await insert_user(conn, user)


async def get_users(filter: UserRecord) -> list[UserRecord]:
    statement = build_select("user_account", filter.present())
    with translate_errors("user"):
        async with db_engine.connect() as conn:
            return await fetch_records(conn, statement, UserRecord)


async def record_login(user_id: str, tenant_id: str) -> None:
    statement = build_update(
        "user_account",
        {"last_login": utcnow()},
        {"id": user_id, "tenant_id": tenant_id},
    )
    with translate_errors("user"):
        async with db_engine.begin() as conn:
            await execute_update(conn, statement, "user")


async def get_user_supervisors(user_id: str, tenant_id: str) -> list[str]:
    """Ids of the users currently supervising ``user_id``."""
    if not tenant_id:
        raise InternalError("TenantId must be provided to tenant-scoped queries")
    with translate_errors("user"):
        async with db_engine.connect() as conn:
            result = await conn.execute(
                _SUPERVISORS_QUERY, {"user_id": user_id, "tenant_id": tenant_id}
            )
            return [str(supervisor_id) for supervisor_id in result.scalars().all()]


async def insert_position(
    conn: AsyncConnection,
    position_id: str,
    tenant_id: str,
    title: str,
    department_id: str,
    supervisor_position_ids: Sequence[str] = (),
) -> None:
    """Insert a position and its reports-to edges on an open transaction."""
    with translate_errors("position"):
        await conn.execute(
            insert(Position).values(
                id=position_id,
                tenant_id=tenant_id,
                title=title,
                department_id=department_id,
            )
        )
        if supervisor_position_ids:
            await conn.execute(
                insert(SubordinateSupervisorRelationship),
                [
                    {
                        "tenant_id": tenant_id,
                        "subordinate_position_id": position_id,
                        "supervisor_position_id": supervisor_position_id,
                    }
                    for supervisor_position_id in supervisor_position_ids
                ],
            )


async def create_position(
    position_id: str,
    tenant_id: str,
    title: str,
    department_id: str,
    supervisor_position_ids: Sequence[str] = (),
) -> None:
    with translate_errors("position"):
        async with db_engine.begin() as conn:
            await insert_position(
                conn, position_id, tenant_id, title, department_id, supervisor_position_ids
            )


async def insert_position_assignment(
    conn: AsyncConnection,
    tenant_id: str,
    position_id: str,
    user_id: str,
    start_date: date,
    end_date: Optional[date] = None,
) -> None:
    values = {
        "tenant_id": tenant_id,
        "position_id": position_id,
        "user_account_id": user_id,
        "start_date": start_date,
    }
    if end_date is not None:
        values["end_date"] = end_date
    with translate_errors("position assignment"):
        await conn.execute(insert(PositionAssignment).values(**values))


async def create_position_assignment(
    tenant_id: str,
    position_id: str,
    user_id: str,
    start_date: date,
    end_date: Optional[date] = None,
) -> None:
    with translate_errors("position assignment"):
        async with db_engine.begin() as conn:
            await insert_position_assignment(
                conn, tenant_id, position_id, user_id, start_date, end_date
            )
