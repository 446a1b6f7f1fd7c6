"""Job requisition schemas."""

from typing import Optional

from pydantic import Field

from api.schemas.common import CamelModel, CredentialsMixin


class CreateJobRequisitionRequest(CamelModel):
    """
    Either ``position_id`` for an existing position, or ``title``,
    ``department_id`` and ``supervisor_position_ids`` for a new one.
    """

    position_id: Optional[str] = None
    title: Optional[str] = None
    department_id: Optional[str] = None
    supervisor_position_ids: Optional[list[str]] = None
    job_description: Optional[str] = None
    job_requirements: Optional[str] = None
    supervisor: Optional[str] = Field(None, description="User id of one of your supervisors")
    hr_approver: Optional[str] = None


class SupervisorDecisionRequest(CredentialsMixin):
    supervisor_decision: Optional[str] = Field(None, description="APPROVED or REJECTED")


class HRApproverDecisionRequest(CredentialsMixin):
    hr_approver_decision: Optional[str] = Field(None, description="APPROVED or REJECTED")
    recruiter: Optional[str] = Field(None, description="Required when approving")
