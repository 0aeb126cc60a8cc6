"""One-time-password schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

OtpPurpose = Literal["verification", "password_reset", "2fa"]


class OtpRequest(BaseModel):
    """Ask the backend to email a one-time code."""

    email: EmailStr
    purpose: OtpPurpose = "verification"


class OtpVerifyRequest(BaseModel):
    """Submit a one-time code."""

    email: EmailStr
    otp: str = Field(..., min_length=4, max_length=10)


class PasswordResetConfirmRequest(BaseModel):
    """Reset a password with a one-time code."""

    email: EmailStr
    otp: str = Field(..., min_length=4, max_length=10)
    new_password: str = Field(..., min_length=8, max_length=128)


class OtpResponse(BaseModel):
    """Outcome of an OTP operation."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
