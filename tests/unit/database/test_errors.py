"""
Tests for constraint violation translation.

Tests:
- Attribute list grammar
- Registry lookup with detail parsing as fallback
- Guard errors for check constraints
- Extraction from SQLAlchemy exceptions
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from core.errors import (
    InternalError,
    InvalidForeignKeyError,
    MissingHRApprovalError,
    MissingRecruiterShortlistError,
    NotFoundError,
    UniqueViolationError,
)
from database.engine import Base
from database.errors import (
    GUARD_ERRORS,
    ConstraintRegistry,
    ConstraintViolation,
    ViolationKind,
    extract_violation,
    join_attributes,
    parse_detail_attributes,
    translate_errors,
    translate_violation,
)


class FakeDriverError(Exception):
    """Stands in for an asyncpg error: carries sqlstate, constraint_name and detail."""

    def __init__(self, sqlstate, constraint_name=None, detail=None):
        super().__init__(f"violation of {constraint_name}")
        self.sqlstate = sqlstate
        self.constraint_name = constraint_name
        self.detail = detail


def integrity_error(sqlstate, constraint_name=None, detail=None):
    return IntegrityError("INSERT ...", (), FakeDriverError(sqlstate, constraint_name, detail))


@pytest.fixture
def registry():
    registry = ConstraintRegistry()
    registry.register("uq_user_account_tenant_id_email", ("tenant_id", "email"))
    registry.register("fk_position_department", ("tenant_id", "department_id"))
    return registry


class TestJoinAttributes:
    @pytest.mark.parametrize("attributes,expected", [
        (["email"], "email"),
        (["tenant id", "email"], "tenant id and email"),
        (["tenant id", "division id", "name"], "tenant id, division id, and name"),
    ])
    def test_grammar(self, attributes, expected):
        assert join_attributes(attributes) == expected


class TestParseDetail:
    @pytest.mark.parametrize("detail,expected", [
        ("Key (tenant_id, email)=(t1, a@b.com) already exists.", ["tenant_id", "email"]),
        ("Key (id)=(abc) is not present in table \"tenant\".", ["id"]),
        ("something else", []),
        ("", []),
    ])
    def test_parse(self, detail, expected):
        assert parse_detail_attributes(detail) == expected


class TestTranslateViolation:
    """Test mapping violations to domain errors."""

    def test_unique_from_registry(self, registry):
        error = translate_violation(
            ConstraintViolation(ViolationKind.UNIQUE, "uq_user_account_tenant_id_email"),
            "user",
            registry=registry,
        )

        assert isinstance(error, UniqueViolationError)
        assert error.status == 409
        assert error.message == "A user with the provided tenant id and email already exists"

    def test_unique_falls_back_to_detail(self, registry):
        error = translate_violation(
            ConstraintViolation(
                ViolationKind.UNIQUE, "unregistered", "Key (tenant_id, division_id, name)=(a, b, c) already exists."
            ),
            "department",
            registry=registry,
        )

        assert error.message == (
            "A department with the provided tenant id, division id, and name already exists"
        )

    def test_foreign_key_combination(self, registry):
        error = translate_violation(
            ConstraintViolation(ViolationKind.FOREIGN_KEY, "fk_position_department"),
            "position",
            registry=registry,
        )

        assert isinstance(error, InvalidForeignKeyError)
        assert error.status == 400
        assert error.message == "The provided tenant id-department id combination is invalid"

    def test_foreign_key_single(self, registry):
        error = translate_violation(
            ConstraintViolation(ViolationKind.FOREIGN_KEY, None, "Key (tenant_id)=(x) is not present"),
            "division",
            registry=registry,
        )
        assert error.message == "The provided tenant id is invalid"

    def test_unknown_attributes(self, registry):
        error = translate_violation(
            ConstraintViolation(ViolationKind.UNIQUE, "unregistered", "no key here"),
            "user",
            registry=registry,
        )
        assert isinstance(error, InternalError)

    @pytest.mark.parametrize("constraint_name", sorted(GUARD_ERRORS))
    def test_guard_errors(self, constraint_name):
        error = translate_violation(ConstraintViolation(ViolationKind.CHECK, constraint_name), "x")
        assert isinstance(error, GUARD_ERRORS[constraint_name])

    def test_guard_error_codes(self):
        error = translate_violation(
            ConstraintViolation(ViolationKind.CHECK, "ck_recruiter_shortlist_before_setting_interview_date"),
            "job application",
        )
        assert isinstance(error, MissingRecruiterShortlistError)
        assert (error.status, error.code) == (403, "MISSING-RECRUITER-SHORTLIST-ERROR")

    def test_unknown_check_constraint(self):
        error = translate_violation(ConstraintViolation(ViolationKind.CHECK, "ck_unknown"), "x")
        assert isinstance(error, InternalError)

    def test_call_site_check_table(self):
        error = translate_violation(
            ConstraintViolation(ViolationKind.CHECK, "ck_custom"),
            "x",
            check_errors={"ck_custom": MissingHRApprovalError},
        )
        assert isinstance(error, MissingHRApprovalError)


class TestExtractViolation:
    def test_reads_driver_fields(self):
        violation = extract_violation(integrity_error("23505", "uq_tenant_name", "Key (name)=(x)"))

        assert violation == ConstraintViolation(ViolationKind.UNIQUE, "uq_tenant_name", "Key (name)=(x)")

    def test_reads_cause_of_adapted_error(self):
        adapted = Exception("adapted")
        adapted.__cause__ = FakeDriverError("23514", "ck_req_filled_only_with_hr_approval")
        error = IntegrityError("UPDATE ...", (), adapted)

        violation = extract_violation(error)

        assert violation.kind is ViolationKind.CHECK
        assert violation.constraint_name == "ck_req_filled_only_with_hr_approval"

    def test_other_sqlstate(self):
        assert extract_violation(integrity_error("40001")) is None


class TestTranslateErrors:
    """Test the context manager used by every storage function."""

    def test_integrity_error_translated(self):
        with pytest.raises(MissingHRApprovalError) as exc_info:
            with translate_errors("job requisition"):
                raise integrity_error("23514", "ck_recruiter_assignment_only_with_hr_approval")

        assert isinstance(exc_info.value.__cause__, IntegrityError)

    def test_operational_error_is_internal(self):
        with pytest.raises(InternalError):
            with translate_errors("user"):
                raise OperationalError("SELECT 1", (), Exception("connection refused"))

    def test_domain_errors_pass_through(self):
        with pytest.raises(NotFoundError):
            with translate_errors("user"):
                raise NotFoundError("user")


class TestRegistryFromMetadata:
    def test_loads_named_constraints(self):
        import database.models  # noqa: F401

        registry = ConstraintRegistry().load(Base.metadata)

        assert registry.attributes_for("uq_user_account_tenant_email") == ("tenant_id", "email")
        assert registry.attributes_for("fk_position_department") == ("department_id",)
        assert "ck_hr_approval_only_with_supervisor_approval" not in registry
