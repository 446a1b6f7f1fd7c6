"""Common Pydantic schemas shared across the API."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Request body with camelCase keys on the wire.

    Fields are optional so that missing values reach the input validators,
    which report every problem in one response.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error response model."""

    code: str = Field(description="Stable error code for programmatic handling")
    message: str = Field(description="Client-safe description of the error")


class CredentialsMixin(CamelModel):
    """Password and TOTP code re-entered to confirm a sensitive decision."""

    password: Optional[str] = None
    totp: Optional[str] = None


class NewCredentialsResponse(CamelModel):
    """Credentials generated for a new user. Shown once."""

    password: str
    totp_secret_key: str
