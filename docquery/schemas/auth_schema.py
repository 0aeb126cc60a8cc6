"""Authentication request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


class RegisterRequest(BaseModel):
    """User registration request."""

    email: EmailStr = Field(description="User email address")
    username: str = Field(
        min_length=2,
        max_length=100,
        description="Display name",
    )
    full_name: str | None = Field(default=None, description="Full name")
    password: str = Field(
        min_length=8,
        max_length=128,
        description="Password (8-128 chars)",
    )
    confirm_password: str = Field(description="Password confirmation")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr = Field(description="User email address")
    password: str = Field(description="User password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class TokenPair(BaseModel):
    """Access/refresh token pair returned by login and refresh."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """Public user representation."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    username: str
    full_name: str | None = None
    is_active: bool = True
    is_verified: bool = False
    totp_enabled: bool = False
    avatar_url: str | None = None
    created_at: datetime


class ProfileUpdateRequest(BaseModel):
    """Profile fields a user may change."""

    username: str | None = Field(default=None, min_length=2, max_length=100)
    full_name: str | None = None
    avatar_url: str | None = None


class PasswordChangeRequest(BaseModel):
    """Password change request."""

    current_password: str
    new_password: str = Field(min_length=8, max_length=128)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordChangeRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserStats(BaseModel):
    """Per-user usage counters."""

    model_config = ConfigDict(frozen=True)

    document_count: int
    query_count: int
