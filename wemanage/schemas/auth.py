"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from wemanage.models.enums import UserRole


class UserRegister(BaseModel):
    """User registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    email: str
    avatar_url: str | None
    role: UserRole


class AuthResponse(UserResponse):
    """User fields plus a freshly issued bearer token."""

    token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr = Field(..., max_length=255)


class ResetPasswordRequest(BaseModel):
    # Length policy is enforced by the reset service so it reports a 400
    password: str = Field(..., max_length=128)


class MessageResponse(BaseModel):
    message: str
