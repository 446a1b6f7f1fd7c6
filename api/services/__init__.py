"""
API Services Layer.

Input validation, workflow guards and domain event logging for the API
endpoints. Persistence is delegated to ``database.storage``.
"""

from api.services.tenants import (
    create_tenant,
    create_division,
    create_department,
)

from api.services.users import (
    create_user,
    list_users,
    authenticate,
    create_position,
    create_position_assignment,
)

from api.services.sessions import (
    login,
    logout,
)

from api.services.policies import (
    create_policies,
    create_role_assignment,
)

from api.services.job_requisitions import (
    create_job_requisition,
    list_job_requisitions,
    set_supervisor_decision,
    set_hr_approver_decision,
)

from api.services.job_applications import (
    create_job_application,
    list_job_applications,
    set_recruiter_decision,
    set_interview_date,
    set_hiring_manager_decision,
    set_applicant_decision,
)

__all__ = [
    # Tenants
    "create_tenant",
    "create_division",
    "create_department",
    # Users
    "create_user",
    "list_users",
    "authenticate",
    "create_position",
    "create_position_assignment",
    # Sessions
    "login",
    "logout",
    # Policies
    "create_policies",
    "create_role_assignment",
    # Job requisitions
    "create_job_requisition",
    "list_job_requisitions",
    "set_supervisor_decision",
    "set_hr_approver_decision",
    # Job applications
    "create_job_application",
    "list_job_applications",
    "set_recruiter_decision",
    "set_interview_date",
    "set_hiring_manager_decision",
    "set_applicant_decision",
]
