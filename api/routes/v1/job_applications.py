"""
Job application endpoints.

Creating an application is public: applicants are not users. Every later
stage is performed by a user in their role on the parent requisition.
"""

from datetime import date
from typing import Optional

import pydantic
from fastapi import APIRouter, Depends, File, Form, Path, Query, Response, UploadFile, status
from fastapi.responses import JSONResponse

from api.schemas.job_applications import (
    ApplicantDecisionRequest,
    HiringManagerDecisionRequest,
    InterviewDateRequest,
    JobApplicationData,
    NewHireResponse,
    RecruiterDecisionRequest,
)
from api.services import job_applications as job_application_service
from core.config import settings
from core.errors import FileTooBigError, InvalidJSONError, ValidationError
from core.middleware.authorization import require_acting_user, require_authorization

router = APIRouter(prefix="/tenants/{tenantId}", tags=["job-applications"])

RECRUITER_STEP = "/users/{userId}/job-requisitions/role-recruiter/{jobRequisitionId}/job-applications/{jobApplicationId}"
HIRING_MANAGER_STEP = "/users/{userId}/job-requisitions/role-requestor/{jobRequisitionId}/job-applications/{jobApplicationId}"


def _parse_application_data(data: Optional[str]) -> JobApplicationData:
    if data is None:
        raise ValidationError(["You must provide a data"])
    try:
        return JobApplicationData.model_validate_json(data)
    except pydantic.ValidationError as e:
        raise InvalidJSONError("The data field is not valid JSON") from e


@router.post(
    "/job-applications/{jobApplicationId}",
    summary="Apply",
    description="Multipart form: a ``data`` JSON field and a ``resume`` file (.pdf or .docx).",
    status_code=status.HTTP_201_CREATED,
)
async def create_job_application(
    tenant_id: str = Path(..., alias="tenantId"),
    job_application_id: str = Path(..., alias="jobApplicationId"),
    data: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
):
    application = _parse_application_data(data)
    if resume is None:
        raise ValidationError(["You must provide a resume"])
    if resume.size is not None and resume.size > settings.max_resume_upload_bytes:
        raise FileTooBigError(settings.max_resume_upload_bytes)

    await job_application_service.create_job_application(
        tenant_id,
        job_application_id,
        job_requisition_id=application.job_requisition_id,
        first_name=application.first_name,
        last_name=application.last_name,
        country_code=application.country_code,
        phone_number=application.phone_number,
        email=application.email,
        resume=resume.file,
        resume_filename=resume.filename,
    )
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    "/job-applications",
    summary="List Job Applications",
    dependencies=[Depends(require_authorization)],
)
async def list_job_applications(
    tenant_id: str = Path(..., alias="tenantId"),
    id: Optional[str] = Query(None),
    job_requisition_id: Optional[str] = Query(None, alias="jobRequisitionId"),
    recruiter_decision: Optional[str] = Query(None, alias="recruiterDecision"),
    hiring_manager_decision: Optional[str] = Query(None, alias="hiringManagerDecision"),
    applicant_decision: Optional[str] = Query(None, alias="applicantDecision"),
    offer_start_date: Optional[date] = Query(None, alias="offerStartDate", description="Offers starting on or before"),
    offer_end_date: Optional[date] = Query(None, alias="offerEndDate", description="Offers ending on or after"),
):
    return await job_application_service.list_job_applications(
        tenant_id,
        id=id,
        job_requisition_id=job_requisition_id,
        recruiter_decision=recruiter_decision,
        hiring_manager_decision=hiring_manager_decision,
        applicant_decision=applicant_decision,
        offer_start_date=offer_start_date,
        offer_end_date=offer_end_date,
    )


@router.put(
    f"{RECRUITER_STEP}/recruiter-decision",
    summary="Recruiter Decision",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_acting_user)],
)
async def set_recruiter_decision(
    body: RecruiterDecisionRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
    job_requisition_id: str = Path(..., alias="jobRequisitionId"),
    job_application_id: str = Path(..., alias="jobApplicationId"),
):
    await job_application_service.set_recruiter_decision(
        tenant_id, user_id, job_requisition_id, job_application_id, body.recruiter_decision
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    f"{RECRUITER_STEP}/interview-date",
    summary="Set Interview Date",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_acting_user)],
)
async def set_interview_date(
    body: InterviewDateRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
    job_requisition_id: str = Path(..., alias="jobRequisitionId"),
    job_application_id: str = Path(..., alias="jobApplicationId"),
):
    await job_application_service.set_interview_date(
        tenant_id, user_id, job_requisition_id, job_application_id, body.interview_date
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    f"{HIRING_MANAGER_STEP}/hiring-manager-decision",
    summary="Hiring Manager Decision",
    description="Make or decline an offer. The offer end date is optional.",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_acting_user)],
)
async def set_hiring_manager_decision(
    body: HiringManagerDecisionRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
    job_requisition_id: str = Path(..., alias="jobRequisitionId"),
    job_application_id: str = Path(..., alias="jobApplicationId"),
):
    await job_application_service.set_hiring_manager_decision(
        tenant_id,
        user_id,
        job_requisition_id,
        job_application_id,
        body.hiring_manager_decision,
        offer_start_date=body.offer_start_date,
        offer_end_date=body.offer_end_date,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    f"{RECRUITER_STEP}/applicant-decision",
    summary="Applicant Decision",
    description="Record the applicant's answer. Accepting onboards the applicant "
    "and returns their credentials once.",
    dependencies=[Depends(require_acting_user)],
    responses={201: {"model": NewHireResponse}, 204: {"description": "Offer declined"}},
)
async def set_applicant_decision(
    body: ApplicantDecisionRequest,
    tenant_id: str = Path(..., alias="tenantId"),
    user_id: str = Path(..., alias="userId"),
    job_requisition_id: str = Path(..., alias="jobRequisitionId"),
    job_application_id: str = Path(..., alias="jobApplicationId"),
):
    new_hire = await job_application_service.set_applicant_decision(
        tenant_id, user_id, job_requisition_id, job_application_id, body.applicant_decision
    )
    if new_hire is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=new_hire)
