"""Request/response schemas for auth endpoints and token value types."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LangCode(str, Enum):
    EN = "en"
    VN = "vn"


class TokenPayload(BaseModel):
    """Minimal claim set carried by access and refresh tokens."""

    id: int
    email: str
    role: str


class AccessToken(BaseModel):
    token: str
    expires_in_seconds: int


class ResetTicket(BaseModel):
    """A freshly generated reset token; only token_hash and expires_at are persisted."""

    token: str
    token_hash: str
    expires_at: datetime


class SignUpRequest(BaseModel):
    """Customer registration."""

    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=2, max_length=128)
    phone: str | None = Field(default=None, max_length=32)
    full_name: str | None = Field(default=None, max_length=255)


class SignInRequest(BaseModel):
    """Credentials for sign in."""

    email: str = Field(..., min_length=1, max_length=255, description="Email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=2, max_length=128)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=255)
    reset_password: str = Field(..., min_length=2, max_length=128)


class PermissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    create: bool
    update: bool
    remove: bool


class UserProfile(BaseModel):
    """Account as returned to clients: never includes the password hash or timestamps."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str | None = None
    phone: str | None = None
    role: str
    permission: PermissionOut | None = None


class SignInResponse(BaseModel):
    access_token: str
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    info: UserProfile
    is_auth: bool = True
    # Delivered to the client as an httpOnly cookie, never in the JSON body.
    refresh_token: str | None = Field(default=None, exclude=True)


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: int


class StatusMessage(BaseModel):
    """Terminal OK outcome for flows that return no payload."""

    message: str


class CurrentUser(BaseModel):
    """Authenticated user (id, email, role) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: str
