"""
Onboarding of an applicant who accepted an offer.

Creating the account, assigning the position, filling the requisition and
recording the acceptance commit together or not at all.
"""

import logging

from core.errors import NotFoundError
from database.engine import db_engine
from database.errors import translate_errors
from database.models import ApplicantDecision
from database.query_builder import build_select, build_update
from database.records import JobApplicationRecord, JobRequisitionRecord, UserRecord
from database.storage import fetch_records, execute_update, utcnow
from database.storage.users import insert_user, insert_position_assignment

logger = logging.getLogger(__name__)


async def onboard_new_hire(
    new_user: UserRecord,
    job_requisition_id: str,
    job_application: JobApplicationRecord,
) -> None:
    """
    Args:
        new_user: the account to create, with hashed password and TOTP secret
        job_requisition_id: the requisition the applicant is filling
        job_application: must carry ``id``, ``tenant_id`` and the offer dates
    """
    tenant_id = new_user.tenant_id

    with translate_errors("new hire"):
        async with db_engine.begin() as conn:
            await insert_user(conn, new_user)

            requisitions = await fetch_records(
                conn,
                build_select(
                    "job_requisition",
                    {"id": job_requisition_id, "tenant_id": tenant_id},
                    columns=["position_id"],
                ),
                JobRequisitionRecord,
            )
            if not requisitions or requisitions[0].position_id is None:
                raise NotFoundError("job requisition")

            await insert_position_assignment(
                conn,
                tenant_id,
                requisitions[0].position_id,
                new_user.id,
                job_application.offer_start_date,
                job_application.offer_end_date,
            )

            await execute_update(
                conn,
                build_update(
                    "job_requisition",
                    {"filled_by": new_user.id, "filled_at": utcnow(), "updated_at": utcnow()},
                    {"id": job_requisition_id, "tenant_id": tenant_id, "filled_by": None},
                ),
                "job requisition",
            )

            await execute_update(
                conn,
                build_update(
                    "job_application",
                    {
                        "applicant_decision": ApplicantDecision.ACCEPTED.value,
                        "updated_at": utcnow(),
                    },
                    {
                        "id": job_application.id,
                        "tenant_id": tenant_id,
                        "job_requisition_id": job_requisition_id,
                        "applicant_decision": None,
                    },
                ),
                "job application",
            )

    logger.info(
        "New hire onboarded",
        extra={"user_id": new_user.id, "job_requisition_id": job_requisition_id},
    )
