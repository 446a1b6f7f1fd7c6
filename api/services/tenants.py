"""Tenant, division and department service functions."""

import logging

from core.validation import raise_for_failures, validate_named_unit
from database.storage import tenants as tenant_storage

logger = logging.getLogger(__name__)


async def create_tenant(tenant_id: str, name: str) -> None:
    raise_for_failures(validate_named_unit("tenant", {"tenant id": tenant_id}, name))
    await tenant_storage.create_tenant(tenant_id, name)
    logger.info("TENANT-CREATED", extra={"tenant_id": tenant_id})


async def create_division(tenant_id: str, division_id: str, name: str) -> None:
    raise_for_failures(
        validate_named_unit(
            "division", {"tenant id": tenant_id, "division id": division_id}, name
        )
    )
    await tenant_storage.create_division(division_id, tenant_id, name)
    logger.info("DIVISION-CREATED", extra={"tenant_id": tenant_id, "division_id": division_id})


async def create_department(
    tenant_id: str, division_id: str, department_id: str, name: str
) -> None:
    raise_for_failures(
        validate_named_unit(
            "department",
            {"tenant id": tenant_id, "division id": division_id, "department id": department_id},
            name,
        )
    )
    await tenant_storage.create_department(department_id, tenant_id, division_id, name)
    logger.info(
        "DEPARTMENT-CREATED",
        extra={"tenant_id": tenant_id, "division_id": division_id, "department_id": department_id},
    )
