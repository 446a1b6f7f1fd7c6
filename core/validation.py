"""
Input validation.

Each input type has an explicit ``validate_*`` function returning a list of
``FieldFailure``. Checks for a field run in order from broadest (required)
to most specific and stop at the field's first failure. Failures are
rendered through ``MESSAGES`` and raised together as a ``ValidationError``.
"""

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Iterable, Optional, Sequence

from core.errors import ValidationError

MINIMUM_POSITION_ASSIGNMENT_DURATION_DAYS = 30

ALLOWED_RESUME_EXTENSIONS = (".pdf", ".docx")
POLICY_METHODS = ("POST", "GET", "PUT", "DELETE")

MESSAGES: dict[str, str] = {
    "required": "You must provide a {0}",
    "notBlank": "The {0} cannot be blank",
    "notBlankItems": "You did not provide any {0}",
    "uuid": "The {0} must be a valid UUID",
    "oneof": "The {0} must be one of [{1}]",
    "alpha": "The {0} can only contain alphabetic characters",
    "number": "The {0} must be a valid numeric value",
    "email": "The {0} must be a valid email address",
    "isIsoDate": 'The {0} must follow the "yyyy-mm-dd" format',
    "validPositionAssignmentDuration": (
        f"The end date must be at least {MINIMUM_POSITION_ASSIGNMENT_DURATION_DAYS} "
        "days after the start date"
    ),
}

_ALPHA = re.compile(r"^[A-Za-z]+$")
_NUMBER = re.compile(r"^[0-9]+$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_UUID = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")


@dataclass(frozen=True)
class FieldFailure:
    field: str
    rule: str
    param: str = ""

    def message(self) -> str:
        return MESSAGES[self.rule].format(self.field, self.param)


@dataclass(frozen=True)
class Rule:
    name: str
    check: Callable[[Any], bool]
    param: str = ""


def _is_uuid(value: Any) -> bool:
    # Canonical 8-4-4-4-12 only; braces, urn: prefixes and bare hex are rejected
    return isinstance(value, str) and bool(_UUID.fullmatch(value))


def parse_iso_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def one_of(*choices: str) -> Rule:
    return Rule("oneof", lambda value: value in choices, " ".join(choices))


REQUIRED = Rule("required", lambda value: value is not None)
NOT_BLANK = Rule("notBlank", lambda value: not isinstance(value, str) or value.strip() != "")
UUID = Rule("uuid", _is_uuid)
ALPHA = Rule("alpha", lambda value: isinstance(value, str) and bool(_ALPHA.match(value)))
NUMBER = Rule("number", lambda value: isinstance(value, str) and bool(_NUMBER.match(value)))
EMAIL = Rule("email", lambda value: isinstance(value, str) and bool(_EMAIL.match(value)))
ISO_DATE = Rule("isIsoDate", lambda value: parse_iso_date(value) is not None)


def valid_position_assignment_duration(start: date, end: Optional[date]) -> bool:
    """
    An open-ended assignment is always valid. Otherwise the inclusive span
    (end - start + 1 day) must exceed the minimum, so a 30-day gap passes
    and a 29-day gap does not.
    """
    if end is None:
        return True
    minimum = timedelta(days=MINIMUM_POSITION_ASSIGNMENT_DURATION_DAYS)
    return (end - start) + timedelta(days=1) > minimum


class FieldChecker:
    """Collects the first failure of every checked field."""

    def __init__(self):
        self.failures: list[FieldFailure] = []

    def check(self, field: str, value: Any, *rules: Rule, optional: bool = False) -> bool:
        if optional and (value is None or value == ""):
            return True
        for rule in rules:
            if not rule.check(value):
                self.failures.append(FieldFailure(field, rule.name, rule.param))
                return False
        return True

    def check_items(self, field: str, values: Optional[Sequence[Any]], *rules: Rule) -> bool:
        if values is None:
            self.failures.append(FieldFailure(field, "required"))
            return False
        if len(values) == 0:
            self.failures.append(FieldFailure(field, "notBlankItems"))
            return False
        return all(self.check(field, value, *rules) for value in values)

    def check_duration(self, start: Any, end: Any) -> None:
        start_date = parse_iso_date(start)
        end_date = parse_iso_date(end)
        if start_date is None or end_date is None:
            return
        if not valid_position_assignment_duration(start_date, end_date):
            self.failures.append(FieldFailure("end date", "validPositionAssignmentDuration"))


def raise_for_failures(failures: Iterable[FieldFailure]) -> None:
    failures = list(failures)
    if failures:
        raise ValidationError(failure.message() for failure in failures)


# Per-input validators


def validate_login(tenant_id: Any, email: Any, password: Any, totp: Any) -> list[FieldFailure]:
    checker = FieldChecker()
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("user email", email, REQUIRED, NOT_BLANK)
    checker.check("password", password, REQUIRED, NOT_BLANK)
    checker.check("totp", totp, REQUIRED, NOT_BLANK)
    return checker.failures


def validate_named_unit(unit: str, ids: dict[str, Any], name: Any) -> list[FieldFailure]:
    """Tenants, divisions and departments: path ids plus a name."""
    checker = FieldChecker()
    for field, value in ids.items():
        checker.check(field, value, REQUIRED, NOT_BLANK, UUID)
    checker.check(f"{unit} name", name, REQUIRED, NOT_BLANK)
    return checker.failures


def validate_user(user_id: Any, tenant_id: Any, email: Any) -> list[FieldFailure]:
    checker = FieldChecker()
    checker.check("user id", user_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("user email", email, REQUIRED, NOT_BLANK, EMAIL)
    return checker.failures


def validate_position(
    position_id: Any,
    tenant_id: Any,
    title: Any,
    department_id: Any,
    supervisor_position_ids: Optional[Sequence[Any]],
) -> list[FieldFailure]:
    checker = FieldChecker()
    checker.check("position id", position_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("position title", title, REQUIRED, NOT_BLANK)
    checker.check("department id", department_id, REQUIRED, NOT_BLANK, UUID)
    for supervisor_position_id in supervisor_position_ids or ():
        checker.check("supervisor position ids", supervisor_position_id, NOT_BLANK, UUID)
    return checker.failures


def validate_position_assignment(
    tenant_id: Any, position_id: Any, user_id: Any, start_date: Any, end_date: Any
) -> list[FieldFailure]:
    checker = FieldChecker()
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("position id", position_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("user id", user_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("start date", start_date, REQUIRED, NOT_BLANK, ISO_DATE)
    if checker.check("end date", end_date, NOT_BLANK, ISO_DATE, optional=True):
        checker.check_duration(start_date, end_date)
    return checker.failures


def validate_policies(
    tenant_id: Any, role: Any, resources: Optional[Sequence[dict[str, Any]]]
) -> list[FieldFailure]:
    checker = FieldChecker()
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("role name", role, REQUIRED, NOT_BLANK)
    if resources is None or len(resources) == 0:
        checker.failures.append(FieldFailure("resources", "notBlankItems"))
        return checker.failures
    for resource in resources:
        checker.check("resource path", resource.get("path"), REQUIRED, NOT_BLANK)
        checker.check(
            "resource method", resource.get("method"), REQUIRED, NOT_BLANK, one_of(*POLICY_METHODS)
        )
    return checker.failures


def validate_role_assignment(user_id: Any, role: Any, tenant_id: Any) -> list[FieldFailure]:
    checker = FieldChecker()
    checker.check("user id", user_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("role name", role, REQUIRED, NOT_BLANK)
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    return checker.failures


def validate_job_requisition(
    id: Any,
    tenant_id: Any,
    position_id: Any,
    title: Any,
    department_id: Any,
    supervisor_position_ids: Optional[Sequence[Any]],
    job_description: Any,
    job_requirements: Any,
    requestor: Any,
    supervisor: Any,
    hr_approver: Any,
) -> list[FieldFailure]:
    """
    Either ``position_id`` names an existing position, or ``title``,
    ``department_id`` and ``supervisor_position_ids`` describe a new one.
    """
    checker = FieldChecker()
    checker.check("job requisition id", id, REQUIRED, NOT_BLANK, UUID)
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)

    describes_new_position = any(
        value is not None for value in (title, department_id, supervisor_position_ids)
    )
    if position_id is None and not describes_new_position:
        checker.failures.append(FieldFailure("position id", "required"))
    elif position_id is not None:
        checker.check("position id", position_id, NOT_BLANK, UUID)
    else:
        checker.check("position title", title, REQUIRED, NOT_BLANK)
        checker.check("department id", department_id, REQUIRED, NOT_BLANK, UUID)
        checker.check_items("supervisor position ids", supervisor_position_ids, NOT_BLANK, UUID)

    checker.check("job description", job_description, REQUIRED, NOT_BLANK)
    checker.check("job requirements", job_requirements, REQUIRED, NOT_BLANK)
    checker.check("requestor id", requestor, REQUIRED, NOT_BLANK, UUID)
    checker.check("supervisor id", supervisor, REQUIRED, NOT_BLANK, UUID)
    checker.check("HR approver id", hr_approver, REQUIRED, NOT_BLANK, UUID)
    return checker.failures


def validate_supervisor_decision(
    id: Any, tenant_id: Any, supervisor: Any, decision: Any, password: Any, totp: Any
) -> list[FieldFailure]:
    checker = FieldChecker()
    checker.check("job requisition id", id, REQUIRED, NOT_BLANK, UUID)
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("supervisor id", supervisor, REQUIRED, NOT_BLANK, UUID)
    checker.check(
        "supervisor's decision", decision, REQUIRED, NOT_BLANK, one_of("APPROVED", "REJECTED")
    )
    checker.check("password", password, REQUIRED, NOT_BLANK)
    checker.check("totp", totp, REQUIRED, NOT_BLANK)
    return checker.failures


def validate_hr_approver_decision(
    id: Any,
    tenant_id: Any,
    hr_approver: Any,
    decision: Any,
    recruiter: Any,
    password: Any,
    totp: Any,
) -> list[FieldFailure]:
    checker = FieldChecker()
    checker.check("job requisition id", id, REQUIRED, NOT_BLANK, UUID)
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("HR approver id", hr_approver, REQUIRED, NOT_BLANK, UUID)
    checker.check(
        "HR approver's decision", decision, REQUIRED, NOT_BLANK, one_of("APPROVED", "REJECTED")
    )
    checker.check(
        "recruiter id", recruiter, REQUIRED, NOT_BLANK, UUID, optional=decision != "APPROVED"
    )
    checker.check("password", password, REQUIRED, NOT_BLANK)
    checker.check("totp", totp, REQUIRED, NOT_BLANK)
    return checker.failures


def validate_job_application(
    id: Any,
    tenant_id: Any,
    job_requisition_id: Any,
    first_name: Any,
    last_name: Any,
    country_code: Any,
    phone_number: Any,
    email: Any,
    file_extension: Any,
) -> list[FieldFailure]:
    checker = FieldChecker()
    checker.check("job application id", id, REQUIRED, NOT_BLANK, UUID)
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("job requisition id", job_requisition_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("first name", first_name, REQUIRED, NOT_BLANK, ALPHA)
    checker.check("last name", last_name, REQUIRED, NOT_BLANK, ALPHA)
    checker.check("country code", country_code, REQUIRED, NOT_BLANK, NUMBER)
    checker.check("phone number", phone_number, REQUIRED, NOT_BLANK, NUMBER)
    checker.check("email", email, REQUIRED, NOT_BLANK, EMAIL)
    checker.check(
        "file extension", file_extension, REQUIRED, NOT_BLANK, one_of(*ALLOWED_RESUME_EXTENSIONS)
    )
    return checker.failures


def _application_step(
    checker: FieldChecker, id: Any, tenant_id: Any, job_requisition_id: Any
) -> None:
    checker.check("job application id", id, REQUIRED, NOT_BLANK, UUID)
    checker.check("tenant id", tenant_id, REQUIRED, NOT_BLANK, UUID)
    checker.check("job requisition id", job_requisition_id, REQUIRED, NOT_BLANK, UUID)


def validate_recruiter_decision(
    id: Any, tenant_id: Any, job_requisition_id: Any, recruiter: Any, decision: Any
) -> list[FieldFailure]:
    checker = FieldChecker()
    _application_step(checker, id, tenant_id, job_requisition_id)
    checker.check("recruiter id", recruiter, REQUIRED, NOT_BLANK, UUID)
    checker.check(
        "recruiter decision", decision, REQUIRED, NOT_BLANK, one_of("SHORTLISTED", "REJECTED")
    )
    return checker.failures


def validate_interview_date(
    id: Any, tenant_id: Any, job_requisition_id: Any, recruiter: Any, interview_date: Any
) -> list[FieldFailure]:
    checker = FieldChecker()
    _application_step(checker, id, tenant_id, job_requisition_id)
    checker.check("recruiter id", recruiter, REQUIRED, NOT_BLANK, UUID)
    checker.check("interview date", interview_date, REQUIRED, NOT_BLANK, ISO_DATE)
    return checker.failures


def validate_hiring_manager_decision(
    id: Any,
    tenant_id: Any,
    job_requisition_id: Any,
    requestor: Any,
    decision: Any,
    offer_start_date: Any,
    offer_end_date: Any,
) -> list[FieldFailure]:
    checker = FieldChecker()
    _application_step(checker, id, tenant_id, job_requisition_id)
    checker.check("hiring manager id", requestor, REQUIRED, NOT_BLANK, UUID)
    checker.check(
        "hiring manager decision", decision, REQUIRED, NOT_BLANK, one_of("OFFERED", "REJECTED")
    )
    checker.check(
        "offer start date",
        offer_start_date,
        REQUIRED,
        NOT_BLANK,
        ISO_DATE,
        optional=decision != "OFFERED",
    )
    if checker.check("offer end date", offer_end_date, NOT_BLANK, ISO_DATE, optional=True):
        checker.check_duration(offer_start_date, offer_end_date)
    return checker.failures


def validate_applicant_decision(
    id: Any, tenant_id: Any, job_requisition_id: Any, recruiter: Any, decision: Any
) -> list[FieldFailure]:
    checker = FieldChecker()
    _application_step(checker, id, tenant_id, job_requisition_id)
    checker.check("recruiter id", recruiter, REQUIRED, NOT_BLANK, UUID)
    checker.check(
        "applicant decision", decision, REQUIRED, NOT_BLANK, one_of("ACCEPTED", "REJECTED")
    )
    return checker.failures
