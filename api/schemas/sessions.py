"""Session schemas."""

from typing import Optional

from api.schemas.common import CamelModel


class LoginRequest(CamelModel):
    tenant_id: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    totp: Optional[str] = None
