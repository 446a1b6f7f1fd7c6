"""Tenant, division, department, user and position schemas."""

from typing import Optional

from pydantic import Field

from api.schemas.common import CamelModel


class NamedUnitRequest(CamelModel):
    """Body for tenants, divisions and departments."""

    name: Optional[str] = None


class CreateUserRequest(CamelModel):
    email: Optional[str] = None


class CreatePositionRequest(CamelModel):
    title: Optional[str] = None
    department_id: Optional[str] = None
    supervisor_position_ids: Optional[list[str]] = Field(
        None, description="Positions this position reports to"
    )


class CreatePositionAssignmentRequest(CamelModel):
    start_date: Optional[str] = Field(None, description="yyyy-mm-dd")
    end_date: Optional[str] = Field(None, description="yyyy-mm-dd, open-ended when omitted")
