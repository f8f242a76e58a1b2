"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON keys are camelCase on the wire (userId, otpExpiry, waitTime).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from src.domain.account import AccountView


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserOut(CamelModel):
    """Sanitized account view."""

    id: str
    username: str
    email: str
    verified: bool

    @classmethod
    def from_view(cls, view: AccountView) -> "UserOut":
        return cls(id=view.id, username=view.username, email=view.email, verified=view.verified)


class RegisterRequest(CamelModel):
    """Request model for registration."""

    username: str = Field(..., min_length=3, max_length=20, description="Username (3-20 characters)")
    email: EmailStr
    password: str = Field(..., min_length=6, description="User password (min 6 characters)")


class RegisterResponse(CamelModel):
    """Response model for registration (new account or OTP refresh)."""

    message: str
    user_id: str
    otp_expiry: datetime


class VerifyOtpRequest(CamelModel):
    """Request model for OTP verification."""

    user_id: str = Field(..., min_length=1)
    otp: str = Field(..., min_length=1, description="6-digit code from the verification email")


class ResendOtpRequest(CamelModel):
    """Request model for resending an OTP by account id."""

    user_id: str = Field(..., min_length=1)


class ResendOtpResponse(CamelModel):
    message: str
    otp_expiry: datetime


class ResendOtpEmailRequest(CamelModel):
    """Request model for resending an OTP by email."""

    email: EmailStr


class ResendOtpEmailResponse(CamelModel):
    """
    Response model for resend by email.

    Returned with 200 even when no account matches; otp_expiry and
    user_id are then null.
    """

    success: bool
    message: str
    otp_expiry: datetime | None = None
    user_id: str | None = None


class LoginRequest(CamelModel):
    """Request model for login."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    """Response model carrying an access token."""

    message: str
    token: str
    user: UserOut


class ProfileResponse(CamelModel):
    user: UserOut


class ErrorResponse(CamelModel):
    """Standard error response model."""

    detail: str
    wait_time: int | None = None
    user_id: str | None = None
