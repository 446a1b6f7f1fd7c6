"""
Job requisition workflow.

A requisition moves through the approval chain one actor at a time:
the requestor creates it, the supervisor decides, then the HR approver
decides and (on approval) assigns a recruiter. Every write is filtered by
the acting user's role on the requisition, so an actor who does not own the
step gets a 404 rather than a silent no-op.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from core.errors import InvalidSupervisorError, NotFoundError, UnauthorizedError
from core.sessions import SessionData
from core.validation import (
    raise_for_failures,
    validate_hr_approver_decision,
    validate_job_requisition,
    validate_supervisor_decision,
)
from api.services.users import authenticate
from database.models import ApprovalDecision
from database.records import JobRequisitionRecord
from database.storage import job_requisitions as job_requisition_storage
from database.storage import users as user_storage

logger = logging.getLogger(__name__)


async def create_job_requisition(
    session: SessionData,
    tenant_id: str,
    requestor: str,
    job_requisition_id: str,
    job_description: Optional[str],
    job_requirements: Optional[str],
    supervisor: Optional[str],
    hr_approver: Optional[str],
    position_id: Optional[str] = None,
    title: Optional[str] = None,
    department_id: Optional[str] = None,
    supervisor_position_ids: Optional[Sequence[str]] = None,
) -> None:
    """
    Open a requisition for an existing position, or for a new one described
    by ``title``, ``department_id`` and ``supervisor_position_ids``.

    Raises:
        ValidationError: malformed input
        InvalidSupervisorError: ``supervisor`` does not supervise the caller
    """
    raise_for_failures(
        validate_job_requisition(
            job_requisition_id,
            tenant_id,
            position_id,
            title,
            department_id,
            supervisor_position_ids,
            job_description,
            job_requirements,
            requestor,
            supervisor,
            hr_approver,
        )
    )

    supervisors = await user_storage.get_user_supervisors(session.user_id, tenant_id)
    if supervisor not in supervisors:
        raise InvalidSupervisorError()

    values: Dict[str, Any] = {
        "id": job_requisition_id,
        "tenant_id": tenant_id,
        "job_description": job_description,
        "job_requirements": job_requirements,
        "requestor": requestor,
        "supervisor": supervisor,
        "hr_approver": hr_approver,
    }
    if position_id is not None:
        values["position_id"] = position_id
    else:
        values.update(
            title=title,
            department_id=department_id,
            supervisor_position_ids=list(supervisor_position_ids or ()),
        )

    await job_requisition_storage.create_job_requisition(JobRequisitionRecord(**values))
    logger.info(
        "JOB-REQUISITION-CREATED",
        extra={"job_requisition_id": job_requisition_id, "tenant_id": tenant_id, "requestor": requestor},
    )


async def list_job_requisitions(tenant_id: str, **filters: Any) -> List[Dict[str, Any]]:
    """Filters left as None are not applied."""
    present = {key: value for key, value in filters.items() if value is not None}
    job_requisitions = await job_requisition_storage.get_job_requisitions(
        JobRequisitionRecord(tenant_id=tenant_id, **present)
    )
    return [job_requisition.to_response() for job_requisition in job_requisitions]


async def set_supervisor_decision(
    session: SessionData,
    tenant_id: str,
    supervisor: str,
    job_requisition_id: str,
    decision: Optional[str],
    password: Optional[str],
    totp: Optional[str],
) -> None:
    raise_for_failures(
        validate_supervisor_decision(
            job_requisition_id, tenant_id, supervisor, decision, password, totp
        )
    )
    await authenticate(tenant_id, password, totp, user_id=session.user_id)

    job_requisitions = await job_requisition_storage.get_job_requisitions(
        JobRequisitionRecord(id=job_requisition_id, tenant_id=tenant_id)
    )
    if not job_requisitions:
        raise NotFoundError(job_requisition_storage.ENTITY)

    # Supervision can end between creation and decision
    supervisors = await user_storage.get_user_supervisors(
        job_requisitions[0].requestor, tenant_id
    )
    if session.user_id not in supervisors:
        raise UnauthorizedError()

    await job_requisition_storage.update_job_requisition(
        JobRequisitionRecord(supervisor_decision=decision),
        JobRequisitionRecord(
            id=job_requisition_id, tenant_id=tenant_id, supervisor=supervisor, filled_by=None
        ),
    )
    logger.info(
        f"JOB-REQUISITION-SUPERVISOR-{decision}",
        extra={"job_requisition_id": job_requisition_id, "tenant_id": tenant_id, "supervisor": supervisor},
    )


async def set_hr_approver_decision(
    session: SessionData,
    tenant_id: str,
    hr_approver: str,
    job_requisition_id: str,
    decision: Optional[str],
    password: Optional[str],
    totp: Optional[str],
    recruiter: Optional[str] = None,
) -> None:
    """
    Approving assigns the recruiter and, when the requisition describes a
    new position, creates it in the same transaction.
    """
    raise_for_failures(
        validate_hr_approver_decision(
            job_requisition_id, tenant_id, hr_approver, decision, recruiter, password, totp
        )
    )
    await authenticate(tenant_id, password, totp, user_id=session.user_id)

    if decision == ApprovalDecision.APPROVED.value:
        await job_requisition_storage.hr_approve_job_requisition(
            job_requisition_id, tenant_id, hr_approver, recruiter
        )
    else:
        await job_requisition_storage.update_job_requisition(
            JobRequisitionRecord(hr_approver_decision=decision),
            JobRequisitionRecord(
                id=job_requisition_id,
                tenant_id=tenant_id,
                hr_approver=hr_approver,
                filled_by=None,
            ),
        )

    logger.info(
        f"JOB-REQUISITION-HR-{decision}",
        extra={"job_requisition_id": job_requisition_id, "tenant_id": tenant_id, "hr_approver": hr_approver},
    )
