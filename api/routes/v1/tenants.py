"""Tenant, division and department endpoints."""

from fastapi import APIRouter, Depends, Path, Response, status

from api.schemas.organization import NamedUnitRequest
from api.services import tenants as tenant_service
from core.middleware.authorization import require_authorization

router = APIRouter(
    prefix="/tenants/{tenantId}",
    tags=["tenants"],
    dependencies=[Depends(require_authorization)],
)


@router.post("", summary="Create Tenant", status_code=status.HTTP_201_CREATED)
async def create_tenant(
    body: NamedUnitRequest,
    tenant_id: str = Path(..., alias="tenantId"),
):
    await tenant_service.create_tenant(tenant_id, body.name)
    return Response(status_code=status.HTTP_201_CREATED)


@router.post(
    "/divisions/{divisionId}",
    summary="Create Division",
    status_code=status.HTTP_201_CREATED,
)
async def create_division(
    body: NamedUnitRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    division_id: str = Path(..., alias="divisionId"),
):
    await tenant_service.create_division(tenant_id, division_id, body.name)
    return Response(status_code=status.HTTP_201_CREATED)


@router.post(
    "/divisions/{divisionId}/departments/{departmentId}",
    summary="Create Department",
    status_code=status.HTTP_201_CREATED,
)
async def create_department(
    body: NamedUnitRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    division_id: str = Path(..., alias="divisionId"),
    department_id: str = Path(..., alias="departmentId"),
):
    await tenant_service.create_department(tenant_id, division_id, department_id, body.name)
    return Response(status_code=status.HTTP_201_CREATED)
