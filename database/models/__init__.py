from database.models.organizations import (
    Tenant,
    Division,
    Department,
    Position,
    SubordinateSupervisorRelationship,
)
from database.models.users import UserAccount, PositionAssignment
from database.models.jobs import JobRequisition, ApprovalDecision
from database.models.applications import (
    JobApplication,
    RecruiterDecision,
    HiringManagerDecision,
    ApplicantDecision,
)
from database.models.policies import AuthorizationRule

__all__ = [
    "Tenant",
    "Division",
    "Department",
    "Position",
    "SubordinateSupervisorRelationship",
    "UserAccount",
    "PositionAssignment",
    "JobRequisition",
    "ApprovalDecision",
    "JobApplication",
    "RecruiterDecision",
    "HiringManagerDecision",
    "ApplicantDecision",
    "AuthorizationRule",
]
