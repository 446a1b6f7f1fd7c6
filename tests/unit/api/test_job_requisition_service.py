"""
Tests for the job requisition workflow service.

Storage calls are patched; these tests cover validation, actor checks and
the filters each step writes with.
"""

from unittest.mock import AsyncMock, patch

import pytest

from api.services import job_requisitions as service
from core.errors import (
    InvalidSupervisorError,
    NotFoundError,
    UnauthenticatedError,
    UnauthorizedError,
    ValidationError,
)
from database.records import JobRequisitionRecord, UserRecord
from tests.constants import (
    JOB_REQUISITION_ID,
    OTHER_USER_ID,
    POSITION_ID,
    TENANT_ID,
    USER_ID,
)

HR_APPROVER_ID = "8c4d6e8f-9a01-4b23-8c45-e6f708192a3b"
RECRUITER_ID = "9d5e7f90-a112-4c34-9d56-f708192a3b4c"


@pytest.fixture
def storage():
    with patch.object(service, "job_requisition_storage") as requisitions, \
            patch.object(service, "user_storage") as users:
        requisitions.ENTITY = "job requisition"
        requisitions.create_job_requisition = AsyncMock()
        requisitions.get_job_requisitions = AsyncMock(return_value=[])
        requisitions.update_job_requisition = AsyncMock()
        requisitions.hr_approve_job_requisition = AsyncMock(return_value=POSITION_ID)
        users.get_user_supervisors = AsyncMock(return_value=[OTHER_USER_ID])
        yield requisitions, users


@pytest.fixture
def authenticate():
    with patch.object(service, "authenticate", AsyncMock(return_value=UserRecord(id=USER_ID))) as mock:
        yield mock


class TestCreateJobRequisition:
    """Test opening a requisition."""

    async def _create(self, session_data, **overrides):
        values = dict(
            requestor=USER_ID,
            job_requisition_id=JOB_REQUISITION_ID,
            job_description="Build the platform",
            job_requirements="Python",
            supervisor=OTHER_USER_ID,
            hr_approver=HR_APPROVER_ID,
            position_id=POSITION_ID,
        )
        values.update(overrides)
        await service.create_job_requisition(session_data, TENANT_ID, **values)

    @pytest.mark.asyncio
    async def test_creates_requisition(self, storage, session_data):
        requisitions, users = storage

        await self._create(session_data)

        users.get_user_supervisors.assert_awaited_once_with(USER_ID, TENANT_ID)
        record = requisitions.create_job_requisition.await_args.args[0]
        assert record.present() == {
            "id": JOB_REQUISITION_ID,
            "tenant_id": TENANT_ID,
            "position_id": POSITION_ID,
            "job_description": "Build the platform",
            "job_requirements": "Python",
            "requestor": USER_ID,
            "supervisor": OTHER_USER_ID,
            "hr_approver": HR_APPROVER_ID,
        }

    @pytest.mark.asyncio
    async def test_supervisor_must_supervise_requestor(self, storage, session_data):
        requisitions, users = storage
        users.get_user_supervisors.return_value = []

        with pytest.raises(InvalidSupervisorError) as exc_info:
            await self._create(session_data)

        assert exc_info.value.code == "INVALID-SUPERVISOR-ERROR"
        requisitions.create_job_requisition.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_validation_runs_before_storage(self, storage, session_data):
        requisitions, users = storage

        with pytest.raises(ValidationError):
            await self._create(session_data, job_description=" ")

        users.get_user_supervisors.assert_not_awaited()


class TestSupervisorDecision:
    """Test the supervisor step."""

    async def _decide(self, session_data, decision="APPROVED"):
        await service.set_supervisor_decision(
            session_data, TENANT_ID, USER_ID, JOB_REQUISITION_ID, decision, "password", "123456"
        )

    @pytest.mark.asyncio
    async def test_approve(self, storage, authenticate, session_data):
        requisitions, users = storage
        requisitions.get_job_requisitions.return_value = [
            JobRequisitionRecord(id=JOB_REQUISITION_ID, requestor=OTHER_USER_ID)
        ]
        users.get_user_supervisors.return_value = [USER_ID]

        await self._decide(session_data)

        authenticate.assert_awaited_once_with(TENANT_ID, "password", "123456", user_id=USER_ID)
        users.get_user_supervisors.assert_awaited_once_with(OTHER_USER_ID, TENANT_ID)
        new_values, filter = requisitions.update_job_requisition.await_args.args
        assert new_values.present() == {"supervisor_decision": "APPROVED"}
        assert filter.present() == {
            "id": JOB_REQUISITION_ID,
            "tenant_id": TENANT_ID,
            "supervisor": USER_ID,
            "filled_by": None,
        }

    @pytest.mark.asyncio
    async def test_bad_credentials(self, storage, authenticate, session_data):
        requisitions, _ = storage
        authenticate.side_effect = UnauthenticatedError()

        with pytest.raises(UnauthenticatedError):
            await self._decide(session_data)

        requisitions.update_job_requisition.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_requisition(self, storage, authenticate, session_data):
        with pytest.raises(NotFoundError):
            await self._decide(session_data)

    @pytest.mark.asyncio
    async def test_no_longer_supervising(self, storage, authenticate, session_data):
        requisitions, users = storage
        requisitions.get_job_requisitions.return_value = [
            JobRequisitionRecord(id=JOB_REQUISITION_ID, requestor=OTHER_USER_ID)
        ]
        users.get_user_supervisors.return_value = [HR_APPROVER_ID]

        with pytest.raises(UnauthorizedError):
            await self._decide(session_data, decision="REJECTED")

        requisitions.update_job_requisition.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_decision(self, storage, authenticate, session_data):
        with pytest.raises(ValidationError) as exc_info:
            await self._decide(session_data, decision="PENDING")

        assert "The supervisor's decision must be one of [APPROVED REJECTED]" in exc_info.value.messages
        authenticate.assert_not_awaited()


class TestHRApproverDecision:
    """Test the HR approval step."""

    @pytest.mark.asyncio
    async def test_approve_assigns_recruiter(self, storage, authenticate, session_data):
        requisitions, _ = storage

        await service.set_hr_approver_decision(
            session_data, TENANT_ID, USER_ID, JOB_REQUISITION_ID,
            "APPROVED", "password", "123456", recruiter=RECRUITER_ID,
        )

        requisitions.hr_approve_job_requisition.assert_awaited_once_with(
            JOB_REQUISITION_ID, TENANT_ID, USER_ID, RECRUITER_ID
        )
        requisitions.update_job_requisition.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reject(self, storage, authenticate, session_data):
        requisitions, _ = storage

        await service.set_hr_approver_decision(
            session_data, TENANT_ID, USER_ID, JOB_REQUISITION_ID, "REJECTED", "password", "123456"
        )

        new_values, filter = requisitions.update_job_requisition.await_args.args
        assert new_values.present() == {"hr_approver_decision": "REJECTED"}
        assert filter.present() == {
            "id": JOB_REQUISITION_ID,
            "tenant_id": TENANT_ID,
            "hr_approver": USER_ID,
            "filled_by": None,
        }
        requisitions.hr_approve_job_requisition.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_approve_without_recruiter(self, storage, authenticate, session_data):
        with pytest.raises(ValidationError):
            await service.set_hr_approver_decision(
                session_data, TENANT_ID, USER_ID, JOB_REQUISITION_ID, "APPROVED", "password", "123456"
            )


class TestListJobRequisitions:
    @pytest.mark.asyncio
    async def test_unset_filters_ignored(self, storage):
        requisitions, _ = storage
        requisitions.get_job_requisitions.return_value = [
            JobRequisitionRecord(id=JOB_REQUISITION_ID, tenant_id=TENANT_ID, supervisor_decision="PENDING")
        ]

        result = await service.list_job_requisitions(TENANT_ID, recruiter=None, supervisor=USER_ID)

        filter = requisitions.get_job_requisitions.await_args.args[0]
        assert filter.present() == {"tenant_id": TENANT_ID, "supervisor": USER_ID}
        assert result[0]["id"] == JOB_REQUISITION_ID
        assert result[0]["supervisorDecision"] == "PENDING"
