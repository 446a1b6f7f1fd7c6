"""
Tests for the onboarding transaction.

The engine is mocked: the tests check that each step runs on the same
transaction and that any failure leaves the transaction block with the
error, which makes SQLAlchemy roll everything back.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.errors import NotFoundError
from database.records import JobApplicationRecord, UserRecord
from database.storage.onboarding import onboard_new_hire
from tests.constants import (
    JOB_APPLICATION_ID,
    JOB_REQUISITION_ID,
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
def transaction(conn):
    transaction = AsyncMock()
    transaction.__aenter__.return_value = conn
    transaction.__aexit__.return_value = False
    return transaction


@pytest.fixture
def engine(transaction):
    engine = MagicMock()
    engine.begin.return_value = transaction
    with patch("database.storage.onboarding.db_engine", engine):
        yield engine


@pytest.fixture
def new_user():
    return UserRecord(
        id=USER_ID,
        tenant_id=TENANT_ID,
        email="Jane_Doe@Acme.com",
        password="$2b$12$hash",
        totp_secret_key="JBSWY3DPEHPK3PXP",
    )


@pytest.fixture
def job_application():
    return JobApplicationRecord(
        id=JOB_APPLICATION_ID,
        tenant_id=TENANT_ID,
        job_requisition_id=JOB_REQUISITION_ID,
        offer_start_date=date(2024, 3, 1),
        offer_end_date=None,
    )


class TestOnboardNewHire:
    """Test the all-or-nothing onboarding transaction."""

    @pytest.mark.asyncio
    async def test_happy_path(self, engine, conn, transaction, new_user, job_application):
        conn.exec_driver_sql.side_effect = [
            driver_result(rows=[{"position_id": POSITION_ID}]),
            driver_result(rowcount=1),
            driver_result(rowcount=1),
        ]

        await onboard_new_hire(new_user, JOB_REQUISITION_ID, job_application)

        engine.begin.assert_called_once()
        # user insert and position assignment insert
        assert conn.execute.await_count == 2
        assert conn.exec_driver_sql.await_count == 3

        fill_sql, fill_params = conn.exec_driver_sql.await_args_list[1].args
        assert fill_sql.startswith("UPDATE job_requisition SET filled_by = $1")
        assert fill_sql.endswith("AND filled_by IS NULL")
        assert fill_params[0] == USER_ID

        accept_sql, accept_params = conn.exec_driver_sql.await_args_list[2].args
        assert accept_sql.startswith("UPDATE job_application SET applicant_decision = $1")
        assert accept_params[0] == "ACCEPTED"
        assert accept_sql.endswith("AND applicant_decision IS NULL")

        assert transaction.__aexit__.await_args.args[0] is None

    @pytest.mark.asyncio
    async def test_already_filled_rolls_back(self, engine, conn, transaction, new_user, job_application):
        conn.exec_driver_sql.side_effect = [
            driver_result(rows=[{"position_id": POSITION_ID}]),
            driver_result(rowcount=0),
        ]

        with pytest.raises(NotFoundError) as exc_info:
            await onboard_new_hire(new_user, JOB_REQUISITION_ID, job_application)

        assert exc_info.value.message == "The job requisition does not exist"
        # the error left the transaction block, so the user and assignment are rolled back
        assert transaction.__aexit__.await_args.args[0] is NotFoundError
        assert conn.exec_driver_sql.await_count == 2

    @pytest.mark.asyncio
    async def test_requisition_without_position(self, engine, conn, transaction, new_user, job_application):
        conn.exec_driver_sql.side_effect = [driver_result(rows=[{"position_id": None}])]

        with pytest.raises(NotFoundError):
            await onboard_new_hire(new_user, JOB_REQUISITION_ID, job_application)

        assert conn.execute.await_count == 1
        assert transaction.__aexit__.await_args.args[0] is NotFoundError

    @pytest.mark.asyncio
    async def test_application_update_failure_rolls_back(
        self, engine, conn, transaction, new_user, job_application
    ):
        conn.exec_driver_sql.side_effect = [
            driver_result(rows=[{"position_id": POSITION_ID}]),
            driver_result(rowcount=1),
            driver_result(rowcount=0),
        ]

        with pytest.raises(NotFoundError) as exc_info:
            await onboard_new_hire(new_user, JOB_REQUISITION_ID, job_application)

        assert exc_info.value.message == "The job application does not exist"
        assert transaction.__aexit__.await_args.args[0] is NotFoundError
