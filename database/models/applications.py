"""
Applications Module

One applicant's candidacy against a single job requisition. Each stage is
written by exactly one actor; the stage ordering is enforced by the named
CHECK constraints below.
"""

from datetime import date, datetime
from enum import Enum as PyEnum

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    Date,
    DateTime,
    Uuid,
    func,
    PrimaryKeyConstraint,
    CheckConstraint,
    Index,
)
from database.engine import Base


class RecruiterDecision(str, PyEnum):
    SHORTLISTED = "SHORTLISTED"
    REJECTED = "REJECTED"


class HiringManagerDecision(str, PyEnum):
    OFFERED = "OFFERED"
    REJECTED = "REJECTED"


class ApplicantDecision(str, PyEnum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class JobApplication(Base):
    __tablename__: str = "job_application"
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenant.id", name="fk_job_application_tenant"), nullable=False
    )
    job_requisition_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("job_requisition.id", name="fk_job_application_job_requisition"),
        nullable=False,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    country_code: Mapped[str] = mapped_column(String(5), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    resume_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    recruiter_decision: Mapped[str | None] = mapped_column(String(20))
    interview_date: Mapped[date | None] = mapped_column(Date)
    hiring_manager_decision: Mapped[str | None] = mapped_column(String(20))
    offer_start_date: Mapped[date | None] = mapped_column(Date)
    offer_end_date: Mapped[date | None] = mapped_column(Date)
    applicant_decision: Mapped[str | None] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_job_application"),
        CheckConstraint(
            "interview_date IS NULL OR recruiter_decision IS NOT DISTINCT FROM 'SHORTLISTED'",
            name="ck_recruiter_shortlist_before_setting_interview_date",
        ),
        CheckConstraint(
            "hiring_manager_decision IS NULL OR interview_date IS NOT NULL",
            name="ck_interview_date_set_before_hiring_manager_offer",
        ),
        CheckConstraint(
            "applicant_decision IS NULL OR hiring_manager_decision IS NOT DISTINCT FROM 'OFFERED'",
            name="ck_hiring_manager_offer_before_applicant_acceptance",
        ),
        Index("idx_job_application_requisition", "job_requisition_id"),
    )
