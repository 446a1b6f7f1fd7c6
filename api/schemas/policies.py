"""Authorization policy schemas."""

from typing import Optional

from api.schemas.common import CamelModel


class Resource(CamelModel):
    path: Optional[str] = None
    method: Optional[str] = None


class CreatePoliciesRequest(CamelModel):
    role: Optional[str] = None
    resources: Optional[list[Resource]] = None
