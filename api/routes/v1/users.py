"""User, position and position assignment endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from api.schemas.common import NewCredentialsResponse
from api.schemas.organization import (
    CreatePositionAssignmentRequest,
    CreatePositionRequest,
    CreateUserRequest,
)
from api.services import users as user_service
from core.middleware.authorization import require_authorization

router = APIRouter(
    prefix="/tenants/{tenantId}",
    tags=["users"],
    dependencies=[Depends(require_authorization)],
)


@router.post(
    "/users/{userId}",
    summary="Create User",
    description="Create a user with a generated password and TOTP secret, returned once.",
    status_code=status.HTTP_201_CREATED,
    response_model=NewCredentialsResponse,
)
async def create_user(
    body: CreateUserRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
):
    return await user_service.create_user(user_id, tenant_id, body.email)


@router.get("/users", summary="List Users")
async def list_users(
    tenant_id: str = Path(..., alias="tenantId"),
    email: Optional[str] = Query(None, description="Filter by email"),
):
    return await user_service.list_users(tenant_id, email)


@router.post(
    "/positions/{positionId}",
    summary="Create Position",
    status_code=status.HTTP_201_CREATED,
)
async def create_position(
    body: CreatePositionRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    position_id: str = Path(..., alias="positionId"),
):
    await user_service.create_position(
        position_id, tenant_id, body.title, body.department_id, body.supervisor_position_ids
    )
    return Response(status_code=status.HTTP_201_CREATED)


@router.post(
    "/users/{userId}/positions/{positionId}",
    summary="Assign Position",
    status_code=status.HTTP_201_CREATED,
)
async def create_position_assignment(
    body: CreatePositionAssignmentRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
    position_id: str = Path(..., alias="positionId"),
):
    await user_service.create_position_assignment(
        tenant_id, position_id, user_id, body.start_date, body.end_date
    )
    return Response(status_code=status.HTTP_201_CREATED)
