"""Authorization policy and role assignment endpoints."""

from fastapi import APIRouter, Depends, Path, Response, status

from api.schemas.policies import CreatePoliciesRequest
from api.services import policies as policy_service
from core.middleware.authorization import PolicyCache, get_policy_cache, require_authorization

router = APIRouter(
    prefix="/tenants/{tenantId}",
    tags=["policies"],
    dependencies=[Depends(require_authorization)],
)


@router.post(
    "/policies",
    summary="Create Policies",
    description="Grant a role access to a list of (path, method) resources.",
    status_code=status.HTTP_201_CREATED,
)
async def create_policies(
    body: CreatePoliciesRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    policy_cache: PolicyCache = Depends(get_policy_cache),
):
    resources = None
    if body.resources is not None:
        resources = [resource.model_dump() for resource in body.resources]
    await policy_service.create_policies(tenant_id, body.role, resources, policy_cache)
    return Response(status_code=status.HTTP_201_CREATED)


@router.post(
    "/users/{userId}/roles/{roleId}",
    summary="Assign Role",
    status_code=status.HTTP_201_CREATED,
)
async def create_role_assignment(
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
    role: str = Path(..., alias="roleId"),
    policy_cache: PolicyCache = Depends(get_policy_cache),
):
    await policy_service.create_role_assignment(tenant_id, user_id, role, policy_cache)
    return Response(status_code=status.HTTP_201_CREATED)
