"""
Domain error taxonomy.

Every error that may cross the HTTP boundary is an ``HTTPError`` carrying a
status, a stable machine-readable code and a client-safe message. Internal
errors keep their underlying cause for logging but never expose it.
"""

import uuid
from typing import Iterable, Optional


class HTTPError(Exception):
    """Base class for errors rendered as ``{code, message}`` responses."""

    status: int = 500
    code: str = "INTERNAL-SERVER-ERROR"

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        if code is not None:
            self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, code={self.code!r}, message={self.message!r})"


class ValidationError(HTTPError):
    status = 400
    code = "INPUT-VALIDATION-ERROR"
    header = "There are one or more errors with your input(s):"

    def __init__(self, messages: Iterable[str]):
        self.messages = list(messages)
        super().__init__("\n".join([self.header, *self.messages]))


class InvalidJSONError(HTTPError):
    status = 400
    code = "INVALID-JSON-ERROR"

    def __init__(self, message: str = "The request body is not valid JSON"):
        super().__init__(message)


class FileTooBigError(HTTPError):
    status = 413
    code = "FILE-TOO-BIG-ERROR"

    def __init__(self, limit_bytes: int):
        super().__init__(f"The uploaded file must not exceed {limit_bytes // (1024 * 1024)}MB")


class UnauthenticatedError(HTTPError):
    status = 401
    code = "USER-UNAUTHENTICATED"

    def __init__(self, message: str = "You are not authenticated"):
        super().__init__(message)


class UnauthorizedError(HTTPError):
    status = 403
    code = "USER-UNAUTHORISED"

    def __init__(self, message: str = "You are not authorised to perform this action"):
        super().__init__(message)


class WorkflowGuardError(HTTPError):
    """A hiring-workflow precondition was not met."""

    status = 403


class UniqueViolationError(HTTPError):
    status = 409
    code = "UNIQUE-VIOLATION-ERROR"


class InvalidForeignKeyError(HTTPError):
    status = 400
    code = "INVALID-FOREIGN-KEY-ERROR"


class NotFoundError(HTTPError):
    status = 404
    code = "RESOURCE-NOT-FOUND-ERROR"

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"The {entity} does not exist")


class InternalError(HTTPError):
    """
    Unexpected failure. The client only ever sees the trace id; ``detail``
    and the chained cause are for the server log.
    """

    status = 500
    code = "INTERNAL-SERVER-ERROR"

    def __init__(self, detail: str):
        self.detail = detail
        self.trace_id = str(uuid.uuid4())
        super().__init__(f"Something went wrong. Trace ID: {self.trace_id}")


# Workflow guards


class MissingSupervisorApprovalError(WorkflowGuardError):
    code = "MISSING-SUPERVISOR-APPROVAL-ERROR"

    def __init__(self):
        super().__init__("Supervisor approval is missing")


class MissingHRApprovalError(WorkflowGuardError):
    code = "MISSING-HR-APPROVAL-ERROR"

    def __init__(self):
        super().__init__("HR approval is missing")


class MissingRecruiterShortlistError(WorkflowGuardError):
    code = "MISSING-RECRUITER-SHORTLIST-ERROR"

    def __init__(self):
        super().__init__("The applicant has not been shortlisted by the recruiter")


class MissingInterviewDateError(WorkflowGuardError):
    status = 409
    code = "MISSING-INTERVIEW-DATE-ERROR"

    def __init__(self):
        super().__init__("The applicant's interview date has not been set")


class MissingHiringManagerOfferError(WorkflowGuardError):
    status = 409
    code = "MISSING-HIRING-MANAGER-OFFER-ERROR"

    def __init__(self):
        super().__init__("The hiring manager has not made an offer to the applicant")


class InvalidSubordinateSupervisorPairError(HTTPError):
    status = 400
    code = "INVALID-SUBORDINATE-SUPERVISOR-PAIR-ERROR"

    def __init__(self):
        super().__init__("Subordinate Position and Supervisor Position cannot be the same")


class InvalidSupervisorError(HTTPError):
    status = 400
    code = "INVALID-SUPERVISOR-ERROR"

    def __init__(self):
        super().__init__("The supervisor provided is not one of your supervisors")
