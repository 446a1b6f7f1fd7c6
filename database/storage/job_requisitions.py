"""Job requisition persistence."""

import logging
import uuid

from sqlalchemy import insert

from core.errors import NotFoundError
from database.engine import db_engine
from database.errors import translate_errors
from database.models import JobRequisition, ApprovalDecision
from database.query_builder import build_select, build_update
from database.records import JobRequisitionRecord
from database.storage import fetch_records, execute_update, utcnow
from database.storage.users import insert_position

logger = logging.getLogger(__name__)

ENTITY = "job requisition"


async def create_job_requisition(job_requisition: JobRequisitionRecord) -> None:
    with translate_errors(ENTITY):
        async with db_engine.begin() as conn:
            await conn.execute(insert(JobRequisition).values(**job_requisition.present()))


async def get_job_requisitions(filter: JobRequisitionRecord) -> list[JobRequisitionRecord]:
    """Zero matches is a valid result; callers decide whether that is a 404."""
    statement = build_select("job_requisition", filter.present())
    with translate_errors(ENTITY):
        async with db_engine.connect() as conn:
            return await fetch_records(conn, statement, JobRequisitionRecord)


async def update_job_requisition(
    new_values: JobRequisitionRecord, filter: JobRequisitionRecord
) -> None:
    """Conditional update. No matching row raises ``NotFoundError``."""
    statement = build_update(
        "job_requisition",
        {**new_values.present(), "updated_at": utcnow()},
        filter.present(),
    )
    with translate_errors(ENTITY):
        async with db_engine.begin() as conn:
            await execute_update(conn, statement, ENTITY)


async def hr_approve_job_requisition(
    job_requisition_id: str, tenant_id: str, hr_approver: str, recruiter: str
) -> str:
    """
    Approve a requisition as its HR approver and assign the recruiter.

    If the requisition describes a new position, the position and its
    supervisor relationships are created in the same transaction. Returns
    the requisition's position id.
    """
    # A filled requisition is final
    filters = {
        "id": job_requisition_id,
        "tenant_id": tenant_id,
        "hr_approver": hr_approver,
        "filled_by": None,
    }
    select_statement = build_select(
        "job_requisition",
        filters,
        columns=["position_id", "title", "department_id", "supervisor_position_ids"],
    )

    with translate_errors(ENTITY):
        async with db_engine.begin() as conn:
            matches = await fetch_records(conn, select_statement, JobRequisitionRecord)
            if not matches:
                raise NotFoundError(ENTITY)
            requisition = matches[0]

            position_id = requisition.position_id
            if position_id is None:
                position_id = str(uuid.uuid4())
                await insert_position(
                    conn,
                    position_id,
                    tenant_id,
                    requisition.title,
                    requisition.department_id,
                    requisition.supervisor_position_ids or (),
                )

            update_statement = build_update(
                "job_requisition",
                {
                    "hr_approver_decision": ApprovalDecision.APPROVED.value,
                    "recruiter": recruiter,
                    "position_id": position_id,
                    "updated_at": utcnow(),
                },
                filters,
            )
            await execute_update(conn, update_statement, ENTITY)

    return position_id
