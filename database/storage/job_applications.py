"""Job application persistence."""

import logging

from sqlalchemy import insert

from database.engine import db_engine
from database.errors import translate_errors
from database.models import JobApplication
from database.query_builder import build_select, build_update
from database.records import JobApplicationRecord
from database.storage import fetch_records, execute_update, utcnow

logger = logging.getLogger(__name__)

ENTITY = "job application"

# Offer date filters select applications whose offer covers the given range
FILTER_OPERATORS = {"offer_start_date": "<=", "offer_end_date": ">="}


async def create_job_application(job_application: JobApplicationRecord) -> None:
    with translate_errors(ENTITY):
        async with db_engine.begin() as conn:
            await conn.execute(insert(JobApplication).values(**job_application.present()))


async def get_job_applications(filter: JobApplicationRecord) -> list[JobApplicationRecord]:
    statement = build_select("job_application", filter.present(), operators=FILTER_OPERATORS)
    with translate_errors(ENTITY):
        async with db_engine.connect() as conn:
            return await fetch_records(conn, statement, JobApplicationRecord)


async def update_job_application(
    new_values: JobApplicationRecord, filter: JobApplicationRecord
) -> None:
    statement = build_update(
        "job_application",
        {**new_values.present(), "updated_at": utcnow()},
        filter.present(),
        operators=FILTER_OPERATORS,
    )
    with translate_errors(ENTITY):
        async with db_engine.begin() as conn:
            await execute_update(conn, statement, ENTITY)
