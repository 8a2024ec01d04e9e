"""Authentication request/response schemas.

Credential rules (lengths, allowed characters) are enforced by the
authentication service so that failures come back as a message in the
AuthResult; these schemas only bound the payload size.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AccessLevel = Literal["User", "Admin"]


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., max_length=100)
    password: str = Field(..., max_length=128)
    # Page the guard bounced the user away from; must be a local path
    redirect_to: str | None = Field(default=None, max_length=200, pattern=r"^/(?:[^/\\]|$)")


class SignupRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., max_length=100)
    password: str = Field(..., max_length=128)
    confirm_password: str | None = Field(default=None, max_length=128)


class LogoutRequest(BaseModel):
    """The client's answer to the "Do you want to log out?" prompt."""

    confirm: bool


class UserInfo(BaseModel):
    id: str
    username: str
    access_level: AccessLevel = "User"


class AuthResultResponse(BaseModel):
    success: bool
    user: UserInfo | None = None
    message: str | None = None
    redirect_path: str | None = None


class SessionResponse(BaseModel):
    authenticated: bool
    user: UserInfo | None = None
    is_admin: bool = False
    expires_at: datetime | None = None
