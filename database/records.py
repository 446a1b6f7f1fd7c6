"""
Filter and update records for tenant-scoped tables.

Presence is explicit: only the fields a caller actually set take part in a
query, so ``JobApplicationRecord(offer_end_date=None)`` (set to NULL) and
``JobApplicationRecord()`` (not provided) are different records.
"""

from datetime import date, datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def _stringify(value: Any) -> Any:
    # asyncpg hands back its own UUID type for uuid columns
    if value is None or isinstance(value, str):
        return value
    return str(value)


IdStr = Annotated[str, BeforeValidator(_stringify)]


class Record(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def present(self) -> dict[str, Any]:
        """Fields explicitly set by the caller, in declaration order."""
        return self.model_dump(exclude_unset=True)

    def to_response(self) -> dict[str, Any]:
        """JSON-ready camelCase view of every field."""
        return {to_camel(key): value for key, value in self.model_dump(mode="json").items()}


class UserRecord(Record):
    id: Optional[IdStr] = None
    tenant_id: Optional[IdStr] = None
    email: Optional[str] = None
    password: Optional[str] = None
    totp_secret_key: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobRequisitionRecord(Record):
    id: Optional[IdStr] = None
    tenant_id: Optional[IdStr] = None
    position_id: Optional[IdStr] = None
    title: Optional[str] = None
    department_id: Optional[IdStr] = None
    supervisor_position_ids: Optional[list[IdStr]] = None
    job_description: Optional[str] = None
    job_requirements: Optional[str] = None
    requestor: Optional[IdStr] = None
    supervisor: Optional[IdStr] = None
    supervisor_decision: Optional[str] = None
    hr_approver: Optional[IdStr] = None
    hr_approver_decision: Optional[str] = None
    recruiter: Optional[IdStr] = None
    filled_by: Optional[IdStr] = None
    filled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobApplicationRecord(Record):
    id: Optional[IdStr] = None
    tenant_id: Optional[IdStr] = None
    job_requisition_id: Optional[IdStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    country_code: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    resume_url: Optional[str] = None
    recruiter_decision: Optional[str] = None
    interview_date: Optional[date] = None
    hiring_manager_decision: Optional[str] = None
    offer_start_date: Optional[date] = None
    offer_end_date: Optional[date] = None
    applicant_decision: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

