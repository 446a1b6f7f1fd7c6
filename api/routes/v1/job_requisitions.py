"""
Job requisition endpoints.

The ``role-*`` path segment names the part the user plays on the
requisition; the services filter every write by it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from api.schemas.job_requisitions import (
    CreateJobRequisitionRequest,
    HRApproverDecisionRequest,
    SupervisorDecisionRequest,
)
from api.services import job_requisitions as job_requisition_service
from core.middleware.authorization import require_acting_user, require_authorization
from core.sessions import SessionData

router = APIRouter(prefix="/tenants/{tenantId}", tags=["job-requisitions"])


@router.post(
    "/users/{userId}/job-requisitions/role-requestor/{jobRequisitionId}",
    summary="Create Job Requisition",
    status_code=status.HTTP_201_CREATED,
)
async def create_job_requisition(
    body: CreateJobRequisitionRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
    job_requisition_id: str = Path(..., alias="jobRequisitionId"),
    session: SessionData = Depends(require_acting_user),
):
    await job_requisition_service.create_job_requisition(
        session,
        tenant_id,
        requestor=user_id,
        job_requisition_id=job_requisition_id,
        job_description=body.job_description,
        job_requirements=body.job_requirements,
        supervisor=body.supervisor,
        hr_approver=body.hr_approver,
        position_id=body.position_id,
        title=body.title,
        department_id=body.department_id,
        supervisor_position_ids=body.supervisor_position_ids,
    )
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    "/job-requisitions",
    summary="List Job Requisitions",
    dependencies=[Depends(require_authorization)],
)
async def list_job_requisitions(
    tenant_id: str = Path(..., alias="tenantId"),
    id: Optional[str] = Query(None),
    requestor: Optional[str] = Query(None),
    supervisor: Optional[str] = Query(None),
    supervisor_decision: Optional[str] = Query(None, alias="supervisorDecision"),
    hr_approver: Optional[str] = Query(None, alias="hrApprover"),
    hr_approver_decision: Optional[str] = Query(None, alias="hrApproverDecision"),
    recruiter: Optional[str] = Query(None),
):
    return await job_requisition_service.list_job_requisitions(
        tenant_id,
        id=id,
        requestor=requestor,
        supervisor=supervisor,
        supervisor_decision=supervisor_decision,
        hr_approver=hr_approver,
        hr_approver_decision=hr_approver_decision,
        recruiter=recruiter,
    )


@router.put(
    "/users/{userId}/job-requisitions/role-supervisor/{jobRequisitionId}/supervisor-decision",
    summary="Supervisor Decision",
    description="Approve or reject a requisition raised by one of your subordinates.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def set_supervisor_decision(
    body: SupervisorDecisionRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
    job_requisition_id: str = Path(..., alias="jobRequisitionId"),
    session: SessionData = Depends(require_acting_user),
):
    await job_requisition_service.set_supervisor_decision(
        session,
        tenant_id,
        supervisor=user_id,
        job_requisition_id=job_requisition_id,
        decision=body.supervisor_decision,
        password=body.password,
        totp=body.totp,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/users/{userId}/job-requisitions/role-hr-approver/{jobRequisitionId}/hr-approver-decision",
    summary="HR Approver Decision",
    description="Approve (assigning a recruiter) or reject a supervisor-approved requisition.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def set_hr_approver_decision(
    body: HRApproverDecisionRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
    job_requisition_id: str = Path(..., alias="jobRequisitionId"),
    session: SessionData = Depends(require_acting_user),
):
    await job_requisition_service.set_hr_approver_decision(
        session,
        tenant_id,
        hr_approver=user_id,
        job_requisition_id=job_requisition_id,
        decision=body.hr_approver_decision,
        password=body.password,
        totp=body.totp,
        recruiter=body.recruiter,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
