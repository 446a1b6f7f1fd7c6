"""Job application schemas."""

from typing import Optional

from pydantic import Field

from api.schemas.common import CamelModel


class JobApplicationData(CamelModel):
    """The ``data`` part of the multipart job application form."""

    job_requisition_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    country_code: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None


class RecruiterDecisionRequest(CamelModel):
    recruiter_decision: Optional[str] = Field(None, description="SHORTLISTED or REJECTED")


class InterviewDateRequest(CamelModel):
    interview_date: Optional[str] = Field(None, description="yyyy-mm-dd")


class HiringManagerDecisionRequest(CamelModel):
    hiring_manager_decision: Optional[str] = Field(None, description="OFFERED or REJECTED")
    offer_start_date: Optional[str] = None
    offer_end_date: Optional[str] = None


class ApplicantDecisionRequest(CamelModel):
    applicant_decision: Optional[str] = Field(None, description="ACCEPTED or REJECTED")


class NewHireResponse(CamelModel):
    id: str
    email: str
    password: str
    totp_secret_key: str
