"""
Translation of PostgreSQL constraint violations into domain errors.

The persistence layer is the only place that sees raw store errors. Every
storage call runs inside ``translate_errors(entity)``, which turns unique,
foreign-key and check violations into the typed errors from ``core.errors``
and anything else into an ``InternalError``.
"""

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Mapping, Optional, Sequence

from sqlalchemy import (
    MetaData,
    PrimaryKeyConstraint,
    UniqueConstraint,
    ForeignKeyConstraint,
)
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from core.errors import (
    HTTPError,
    InternalError,
    UniqueViolationError,
    InvalidForeignKeyError,
    MissingSupervisorApprovalError,
    MissingHRApprovalError,
    MissingRecruiterShortlistError,
    MissingInterviewDateError,
    MissingHiringManagerOfferError,
    InvalidSubordinateSupervisorPairError,
)

logger = logging.getLogger(__name__)


class ViolationKind(str, Enum):
    UNIQUE = "UNIQUE"
    FOREIGN_KEY = "FOREIGN_KEY"
    CHECK = "CHECK"


# PostgreSQL SQLSTATE codes
SQLSTATE_KINDS: dict[str, ViolationKind] = {
    "23505": ViolationKind.UNIQUE,
    "23503": ViolationKind.FOREIGN_KEY,
    "23514": ViolationKind.CHECK,
}

# Constraint name -> guard error raised when the store rejects a workflow step
GUARD_ERRORS: dict[str, type[HTTPError]] = {
    "ck_hr_approval_only_with_supervisor_approval": MissingSupervisorApprovalError,
    "ck_recruiter_assignment_only_with_hr_approval": MissingHRApprovalError,
    "ck_req_filled_only_with_hr_approval": MissingHRApprovalError,
    "ck_req_filled_at_only_with_hr_approval": MissingHRApprovalError,
    "ck_recruiter_shortlist_before_setting_interview_date": MissingRecruiterShortlistError,
    "ck_interview_date_set_before_hiring_manager_offer": MissingInterviewDateError,
    "ck_hiring_manager_offer_before_applicant_acceptance": MissingHiringManagerOfferError,
    "ck_subordinate_supervisor_not_equal": InvalidSubordinateSupervisorPairError,
}

_DETAIL_KEY_PATTERN = re.compile(r"Key \((?P<attributes>[^)]*)\)=")


@dataclass(frozen=True)
class ConstraintViolation:
    kind: ViolationKind
    constraint_name: Optional[str]
    detail: str = ""


class ConstraintRegistry:
    """
    Constraint name -> ordered attribute names, read from the SQLAlchemy
    metadata once at startup.

    A constraint may override its attribute list through
    ``info={"attributes": (...)}``.
    """

    def __init__(self):
        self._attributes: dict[str, tuple[str, ...]] = {}

    def load(self, metadata: MetaData) -> "ConstraintRegistry":
        attributes: dict[str, tuple[str, ...]] = {}
        for table in metadata.tables.values():
            for constraint in table.constraints:
                if not isinstance(
                    constraint, (PrimaryKeyConstraint, UniqueConstraint, ForeignKeyConstraint)
                ):
                    continue
                if not isinstance(constraint.name, str):
                    continue
                override = constraint.info.get("attributes")
                if override:
                    attributes[constraint.name] = tuple(override)
                elif isinstance(constraint, ForeignKeyConstraint):
                    attributes[constraint.name] = tuple(constraint.column_keys)
                else:
                    attributes[constraint.name] = tuple(col.name for col in constraint.columns)
        self._attributes = attributes
        logger.info("Constraint registry loaded with %d constraints", len(attributes))
        return self

    def register(self, name: str, attributes: Sequence[str]) -> None:
        self._attributes[name] = tuple(attributes)

    def attributes_for(self, name: Optional[str]) -> Optional[tuple[str, ...]]:
        if name is None:
            return None
        return self._attributes.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._attributes

    def __len__(self) -> int:
        return len(self._attributes)


# Populated by the application lifespan
constraint_registry = ConstraintRegistry()


def parse_detail_attributes(detail: str) -> list[str]:
    """Pull the attribute list out of a ``Key (a, b)=(x, y) ...`` detail string."""
    match = _DETAIL_KEY_PATTERN.search(detail or "")
    if not match:
        return []
    return [attribute.strip() for attribute in match.group("attributes").split(",") if attribute.strip()]


def humanize_attribute(attribute: str) -> str:
    return attribute.replace("_", " ")


def join_attributes(attributes: Sequence[str]) -> str:
    """'a' / 'a and b' / 'a, b, and c'"""
    if len(attributes) == 1:
        return attributes[0]
    if len(attributes) == 2:
        return f"{attributes[0]} and {attributes[1]}"
    return f"{', '.join(attributes[:-1])}, and {attributes[-1]}"


def unique_violation_error(entity: str, attributes: Sequence[str]) -> UniqueViolationError:
    return UniqueViolationError(
        f"A {entity} with the provided {join_attributes(attributes)} already exists"
    )


def invalid_foreign_key_error(attributes: Sequence[str]) -> InvalidForeignKeyError:
    if len(attributes) == 1:
        target = attributes[0]
    else:
        target = f"{'-'.join(attributes)} combination"
    return InvalidForeignKeyError(f"The provided {target} is invalid")


def extract_violation(exc: DBAPIError) -> Optional[ConstraintViolation]:
    """
    Find the driver error behind a SQLAlchemy exception and read its
    constraint-violation fields.

    With asyncpg, ``exc.orig`` is SQLAlchemy's adapted DBAPI error and its
    ``__cause__`` is the asyncpg exception carrying ``constraint_name`` and
    ``detail``.
    """
    orig = getattr(exc, "orig", None)
    for candidate in (getattr(orig, "__cause__", None), orig):
        if candidate is None:
            continue
        sqlstate = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        kind = SQLSTATE_KINDS.get(sqlstate)
        if kind is None:
            continue
        return ConstraintViolation(
            kind=kind,
            constraint_name=getattr(candidate, "constraint_name", None),
            detail=getattr(candidate, "detail", None) or "",
        )
    return None


def translate_violation(
    violation: ConstraintViolation,
    entity: str,
    check_errors: Optional[Mapping[str, type[HTTPError]]] = None,
    registry: Optional[ConstraintRegistry] = None,
) -> HTTPError:
    """Map a constraint violation to its domain error."""
    if violation.kind is ViolationKind.CHECK:
        table = GUARD_ERRORS if check_errors is None else check_errors
        error_cls = table.get(violation.constraint_name or "")
        if error_cls is None:
            return InternalError(
                f"Unrecognised check constraint violated: {violation.constraint_name}"
            )
        return error_cls()

    registry = registry if registry is not None else constraint_registry
    attributes = registry.attributes_for(violation.constraint_name)
    if not attributes:
        attributes = parse_detail_attributes(violation.detail)
    if not attributes:
        return InternalError(
            f"Could not determine the attributes of constraint {violation.constraint_name}: "
            f"{violation.detail}"
        )

    humanized = [humanize_attribute(attribute) for attribute in attributes]
    if violation.kind is ViolationKind.UNIQUE:
        return unique_violation_error(entity, humanized)
    return invalid_foreign_key_error(humanized)


def translate_store_error(
    exc: Exception,
    entity: str,
    check_errors: Optional[Mapping[str, type[HTTPError]]] = None,
) -> HTTPError:
    """
    Convert any exception raised while talking to the store into a domain
    error. Already-typed errors pass through untouched.
    """
    if isinstance(exc, HTTPError):
        return exc
    if isinstance(exc, DBAPIError):
        violation = extract_violation(exc)
        if violation is not None:
            return translate_violation(violation, entity, check_errors)
    return InternalError(f"{type(exc).__name__}: {exc}")


@contextmanager
def translate_errors(
    entity: str,
    check_errors: Optional[Mapping[str, type[HTTPError]]] = None,
) -> Iterator[None]:
    """
    Usage:
        with translate_errors("user"):
            await conn.execute(...)
    """
    try:
        yield
    except HTTPError:
        raise
    except SQLAlchemyError as exc:
        raise translate_store_error(exc, entity, check_errors) from exc
