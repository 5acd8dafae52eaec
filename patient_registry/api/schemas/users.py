"""User registration and login schemas."""

from pydantic import Field

from patient_registry.api.schemas.base import ApiModel
from patient_registry.domain.services import MIN_CREDENTIAL_LENGTH


class UserRequest(ApiModel):
    username: str = Field(..., min_length=MIN_CREDENTIAL_LENGTH, description="Username of the user")
    password: str = Field(
        ..., min_length=MIN_CREDENTIAL_LENGTH, description="Password the user will use to log in"
    )


class LoginResponse(ApiModel):
    token: str = Field(
        ...,
        description="Access token for the given credentials; send it as a bearer token on all further requests",
    )
