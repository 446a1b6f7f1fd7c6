"""Tests for the HR approval transaction on job requisitions."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.errors import NotFoundError
from database.storage.job_requisitions import hr_approve_job_requisition
from tests.constants import (
    JOB_REQUISITION_ID,
    OTHER_USER_ID as RECRUITER_ID,
    POSITION_ID,
    TENANT_ID,
    USER_ID,
)


def driver_result(rows=None, rowcount=1):
    result = MagicMock()
    result.mappings.return_value.all.return_value = rows or []
    result.rowcount = rowcount
    return result


@pytest.fixture
def conn():
    return AsyncMock()


@pytest.fixture
def engine(conn):
    transaction = AsyncMock()
    transaction.__aenter__.return_value = conn
    transaction.__aexit__.return_value = False
    engine = MagicMock()
    engine.begin.return_value = transaction
    with patch("database.storage.job_requisitions.db_engine", engine):
        yield engine


class TestHRApproveJobRequisition:
    @pytest.mark.asyncio
    async def test_only_open_requisitions_are_approved(self, engine, conn):
        conn.exec_driver_sql.side_effect = [
            driver_result(rows=[{"position_id": POSITION_ID}]),
            driver_result(rowcount=1),
        ]

        position_id = await hr_approve_job_requisition(
            JOB_REQUISITION_ID, TENANT_ID, USER_ID, RECRUITER_ID
        )

        assert position_id == POSITION_ID
        select_sql, select_params = conn.exec_driver_sql.await_args_list[0].args
        assert select_sql.endswith("AND hr_approver = $3 AND filled_by IS NULL")
        assert select_params == (JOB_REQUISITION_ID, TENANT_ID, USER_ID)

        update_sql, update_params = conn.exec_driver_sql.await_args_list[1].args
        assert update_sql.startswith("UPDATE job_requisition SET hr_approver_decision = $1, recruiter = $2")
        assert update_sql.endswith("AND hr_approver = $7 AND filled_by IS NULL")
        assert update_params[:3] == ("APPROVED", RECRUITER_ID, POSITION_ID)

    @pytest.mark.asyncio
    async def test_filled_requisition_is_not_found(self, engine, conn):
        conn.exec_driver_sql.side_effect = [driver_result(rows=[])]

        with pytest.raises(NotFoundError) as exc_info:
            await hr_approve_job_requisition(JOB_REQUISITION_ID, TENANT_ID, USER_ID, RECRUITER_ID)

        assert exc_info.value.message == "The job requisition does not exist"
        assert conn.exec_driver_sql.await_count == 1
