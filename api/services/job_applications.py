"""
Job application workflow.

Each stage belongs to one actor on the parent requisition: the recruiter
shortlists, schedules the interview and records the applicant's answer; the
hiring manager (the requisition's requestor) makes the offer. Before any
stage the requisition must still carry both approvals.
"""

import logging
import os
import uuid
from typing import Any, BinaryIO, Dict, List, Optional

from core.config import settings
from core.errors import (
    MissingHRApprovalError,
    MissingHiringManagerOfferError,
    MissingSupervisorApprovalError,
    NotFoundError,
)
from core.security import generate_default_credentials
from core.validation import (
    parse_iso_date,
    raise_for_failures,
    validate_applicant_decision,
    validate_hiring_manager_decision,
    validate_interview_date,
    validate_job_application,
    validate_recruiter_decision,
)
from database.models import ApplicantDecision, ApprovalDecision, HiringManagerDecision
from database.records import JobApplicationRecord, JobRequisitionRecord, UserRecord
from database.storage import job_applications as job_application_storage
from database.storage import job_requisitions as job_requisition_storage
from database.storage import onboarding as onboarding_storage
from database.storage import tenants as tenant_storage
from lib import s3

logger = logging.getLogger(__name__)


async def create_job_application(
    tenant_id: str,
    job_application_id: str,
    job_requisition_id: Optional[str],
    first_name: Optional[str],
    last_name: Optional[str],
    country_code: Optional[str],
    phone_number: Optional[str],
    email: Optional[str],
    resume: BinaryIO,
    resume_filename: Optional[str],
) -> None:
    """
    Store the résumé, then the application.

    The uploaded object is removed again if the application cannot be
    stored, so a rejected application leaves nothing behind.
    """
    file_extension = os.path.splitext(resume_filename or "")[1].lower()
    raise_for_failures(
        validate_job_application(
            job_application_id,
            tenant_id,
            job_requisition_id,
            first_name,
            last_name,
            country_code,
            phone_number,
            email,
            file_extension,
        )
    )

    resume_url = await s3.upload_resume(
        resume, job_requisition_id, first_name, last_name, file_extension
    )
    try:
        await job_application_storage.create_job_application(
            JobApplicationRecord(
                id=job_application_id,
                tenant_id=tenant_id,
                job_requisition_id=job_requisition_id,
                first_name=first_name,
                last_name=last_name,
                country_code=country_code,
                phone_number=phone_number,
                email=email,
                resume_url=resume_url,
            )
        )
    except Exception:
        await s3.delete_file_from_s3(
            settings.aws_s3_bucket,
            s3.resume_key(job_requisition_id, first_name, last_name, file_extension),
        )
        raise

    logger.info(
        "JOB-APPLICATION-CREATED",
        extra={
            "job_application_id": job_application_id,
            "job_requisition_id": job_requisition_id,
            "tenant_id": tenant_id,
        },
    )


async def list_job_applications(tenant_id: str, **filters: Any) -> List[Dict[str, Any]]:
    present = {key: value for key, value in filters.items() if value is not None}
    job_applications = await job_application_storage.get_job_applications(
        JobApplicationRecord(tenant_id=tenant_id, **present)
    )
    return [job_application.to_response() for job_application in job_applications]


async def _require_approved_requisition(
    job_requisition_id: str, tenant_id: str, **owner: str
) -> JobRequisitionRecord:
    """
    Fetch the requisition the actor owns and check both approvals are still
    in place.

    Raises:
        NotFoundError: no requisition with that id owned by the actor
        MissingSupervisorApprovalError / MissingHRApprovalError
    """
    job_requisitions = await job_requisition_storage.get_job_requisitions(
        JobRequisitionRecord(id=job_requisition_id, tenant_id=tenant_id, **owner)
    )
    if not job_requisitions:
        raise NotFoundError(job_requisition_storage.ENTITY)
    job_requisition = job_requisitions[0]
    if job_requisition.supervisor_decision != ApprovalDecision.APPROVED.value:
        raise MissingSupervisorApprovalError()
    if job_requisition.hr_approver_decision != ApprovalDecision.APPROVED.value:
        raise MissingHRApprovalError()
    return job_requisition


async def _update_application(
    job_application_id: str,
    tenant_id: str,
    job_requisition_id: str,
    new_values: JobApplicationRecord,
    **open_stage: None,
) -> None:
    """
    ``open_stage`` names the decision columns that must still be unset, so a
    decided stage is never rewritten. No matching row raises ``NotFoundError``.
    """
    await job_application_storage.update_job_application(
        new_values,
        JobApplicationRecord(
            id=job_application_id,
            tenant_id=tenant_id,
            job_requisition_id=job_requisition_id,
            **open_stage,
        ),
    )


async def set_recruiter_decision(
    tenant_id: str,
    recruiter: str,
    job_requisition_id: str,
    job_application_id: str,
    decision: Optional[str],
) -> None:
    raise_for_failures(
        validate_recruiter_decision(
            job_application_id, tenant_id, job_requisition_id, recruiter, decision
        )
    )
    await _require_approved_requisition(job_requisition_id, tenant_id, recruiter=recruiter)
    await _update_application(
        job_application_id,
        tenant_id,
        job_requisition_id,
        JobApplicationRecord(recruiter_decision=decision),
        recruiter_decision=None,
    )
    logger.info(
        f"JOB-APPLICATION-RECRUITER-{decision}",
        extra={"job_application_id": job_application_id, "tenant_id": tenant_id},
    )


async def set_interview_date(
    tenant_id: str,
    recruiter: str,
    job_requisition_id: str,
    job_application_id: str,
    interview_date: Optional[str],
) -> None:
    raise_for_failures(
        validate_interview_date(
            job_application_id, tenant_id, job_requisition_id, recruiter, interview_date
        )
    )
    await _require_approved_requisition(job_requisition_id, tenant_id, recruiter=recruiter)
    await _update_application(
        job_application_id,
        tenant_id,
        job_requisition_id,
        JobApplicationRecord(interview_date=parse_iso_date(interview_date)),
        hiring_manager_decision=None,
    )
    logger.info(
        "JOB-APPLICATION-INTERVIEW-DATE-SET",
        extra={"job_application_id": job_application_id, "tenant_id": tenant_id},
    )


async def set_hiring_manager_decision(
    tenant_id: str,
    requestor: str,
    job_requisition_id: str,
    job_application_id: str,
    decision: Optional[str],
    offer_start_date: Optional[str] = None,
    offer_end_date: Optional[str] = None,
) -> None:
    raise_for_failures(
        validate_hiring_manager_decision(
            job_application_id,
            tenant_id,
            job_requisition_id,
            requestor,
            decision,
            offer_start_date,
            offer_end_date,
        )
    )
    await _require_approved_requisition(job_requisition_id, tenant_id, requestor=requestor)

    new_values: Dict[str, Any] = {"hiring_manager_decision": decision}
    if decision == HiringManagerDecision.OFFERED.value:
        new_values["offer_start_date"] = parse_iso_date(offer_start_date)
        if offer_end_date:
            new_values["offer_end_date"] = parse_iso_date(offer_end_date)

    await _update_application(
        job_application_id,
        tenant_id,
        job_requisition_id,
        JobApplicationRecord(**new_values),
        hiring_manager_decision=None,
    )
    logger.info(
        f"JOB-APPLICATION-HIRING-MANAGER-{decision}",
        extra={"job_application_id": job_application_id, "tenant_id": tenant_id},
    )


def new_hire_email(first_name: str, last_name: str, tenant_name: str) -> str:
    """``first_last@TenantName.com``; spaces in names become underscores."""
    local_part = f"{first_name}_{last_name}".replace(" ", "_")
    return f"{local_part}@{tenant_name.replace(' ', '')}.com"


async def _onboard(
    tenant_id: str, job_requisition_id: str, job_application_id: str
) -> Dict[str, str]:
    tenant_name = await tenant_storage.get_tenant_name(tenant_id)
    if tenant_name is None:
        raise NotFoundError("tenant")

    job_applications = await job_application_storage.get_job_applications(
        JobApplicationRecord(
            id=job_application_id, tenant_id=tenant_id, job_requisition_id=job_requisition_id
        )
    )
    if not job_applications:
        raise NotFoundError(job_application_storage.ENTITY)
    job_application = job_applications[0]
    if job_application.hiring_manager_decision != HiringManagerDecision.OFFERED.value:
        raise MissingHiringManagerOfferError()

    credentials = generate_default_credentials()
    new_user = UserRecord(
        id=str(uuid.uuid4()),
        tenant_id=tenant_id,
        email=new_hire_email(job_application.first_name, job_application.last_name, tenant_name),
        password=credentials.password_hash,
        totp_secret_key=credentials.totp_secret_key,
    )
    await onboarding_storage.onboard_new_hire(new_user, job_requisition_id, job_application)

    return {
        "id": new_user.id,
        "email": new_user.email,
        "password": credentials.password,
        "totpSecretKey": credentials.totp_secret_key,
    }


async def set_applicant_decision(
    tenant_id: str,
    recruiter: str,
    job_requisition_id: str,
    job_application_id: str,
    decision: Optional[str],
) -> Optional[Dict[str, str]]:
    """
    Record the applicant's answer to the offer.

    Returns:
        The new employee's credentials when the applicant accepted, else None.
        The plaintext password and TOTP secret are only ever returned here.
    """
    raise_for_failures(
        validate_applicant_decision(
            job_application_id, tenant_id, job_requisition_id, recruiter, decision
        )
    )
    await _require_approved_requisition(job_requisition_id, tenant_id, recruiter=recruiter)

    new_hire = None
    if decision == ApplicantDecision.ACCEPTED.value:
        new_hire = await _onboard(tenant_id, job_requisition_id, job_application_id)
    else:
        await _update_application(
            job_application_id,
            tenant_id,
            job_requisition_id,
            JobApplicationRecord(applicant_decision=decision),
            applicant_decision=None,
        )

    logger.info(
        f"JOB-APPLICATION-APPLICANT-{decision}",
        extra={"job_application_id": job_application_id, "tenant_id": tenant_id},
    )
    return new_hire
