"""
Jobs Module

Job requisitions: a request to fill a position, moved through the
supervisor and HR approval chain. The chain's ordering is enforced by the
named CHECK constraints below.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Text,
    ForeignKey,
    DateTime,
    Uuid,
    func,
    ARRAY,
    PrimaryKeyConstraint,
    CheckConstraint,
    Index,
)
from database.engine import Base


class ApprovalDecision(str, PyEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class JobRequisition(Base):
    """
    Either ``position_id`` references an existing position, or ``title``,
    ``department_id`` and ``supervisor_position_ids`` describe the position
    that is created when HR approves the requisition.
    """

    __tablename__: str = "job_requisition"
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenant.id", name="fk_job_requisition_tenant"), nullable=False
    )
    position_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("position.id", name="fk_job_requisition_position")
    )
    title: Mapped[str | None] = mapped_column(String(255))
    department_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("department.id", name="fk_job_requisition_department")
    )
    supervisor_position_ids: Mapped[list[str] | None] = mapped_column(ARRAY(Uuid(as_uuid=False)))
    job_description: Mapped[str] = mapped_column(Text, nullable=False)
    job_requirements: Mapped[str] = mapped_column(Text, nullable=False)
    requestor: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("user_account.id", name="fk_job_requisition_requestor"), nullable=False
    )
    supervisor: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("user_account.id", name="fk_job_requisition_supervisor"), nullable=False
    )
    supervisor_decision: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=ApprovalDecision.PENDING.value
    )
    hr_approver: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("user_account.id", name="fk_job_requisition_hr_approver"), nullable=False
    )
    hr_approver_decision: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=ApprovalDecision.PENDING.value
    )
    recruiter: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("user_account.id", name="fk_job_requisition_recruiter")
    )
    filled_by: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("user_account.id", name="fk_job_requisition_filled_by")
    )
    filled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_job_requisition"),
        CheckConstraint(
            "hr_approver_decision = 'PENDING' OR supervisor_decision = 'APPROVED'",
            name="ck_hr_approval_only_with_supervisor_approval",
        ),
        CheckConstraint(
            "recruiter IS NULL OR hr_approver_decision = 'APPROVED'",
            name="ck_recruiter_assignment_only_with_hr_approval",
        ),
        CheckConstraint(
            "filled_by IS NULL OR hr_approver_decision = 'APPROVED'",
            name="ck_req_filled_only_with_hr_approval",
        ),
        CheckConstraint(
            "filled_at IS NULL OR hr_approver_decision = 'APPROVED'",
            name="ck_req_filled_at_only_with_hr_approval",
        ),
        Index("idx_job_requisition_tenant", "tenant_id"),
    )
