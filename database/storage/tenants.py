"""Tenant, division and department persistence."""

import logging
from typing import Optional

from sqlalchemy import insert, select

from database.engine import db_engine
from database.errors import translate_errors
from database.models import Tenant, Division, Department

logger = logging.getLogger(__name__)


async def create_tenant(tenant_id: str, name: str) -> None:
    with translate_errors("tenant"):
        async with db_engine.begin() as conn:
            await conn.execute(insert(Tenant).values(id=tenant_id, name=name))


async def get_tenant_name(tenant_id: str) -> Optional[str]:
    with translate_errors("tenant"):
        async with db_engine.connect() as conn:
            result = await conn.execute(select(Tenant.name).where(Tenant.id == tenant_id))
            return result.scalar_one_or_none()


async def create_division(division_id: str, tenant_id: str, name: str) -> None:
    with translate_errors("division"):
        async with db_engine.begin() as conn:
            await conn.execute(
                insert(Division).values(id=division_id, tenant_id=tenant_id, name=name)
            )


async def create_department(
    department_id: str, tenant_id: str, division_id: str, name: str
) -> None:
    with translate_errors("department"):
        async with db_engine.begin() as conn:
            await conn.execute(
                insert(Department).values(
                    id=department_id,
                    tenant_id=tenant_id,
                    division_id=division_id,
                    name=name,
                )
            )
