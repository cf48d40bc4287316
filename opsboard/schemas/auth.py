"""
Opsboard: Auth and profile schemas
"""
from pydantic import Field, field_validator

from opsboard.models.base import WireModel
from opsboard.models.user import Role


class SessionUser(WireModel):
    id: str
    email: str
    name: str = ""
    role: Role

    @field_validator("name", mode="before")
    @classmethod
    def _blank_name(cls, value):
        # Accounts may have no name; the wire sends null
        return value or ""


class SessionData(WireModel):
    token: str
    user: SessionUser


class LoginRequest(WireModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(WireModel):
    access_token: str
    refresh_token: str | None = None
    user: SessionUser


class ProfileUpdateRequest(WireModel):
    name: str
    email: str


class ChangePasswordRequest(WireModel):
    current_password: str
    new_password: str = Field(..., min_length=6)
