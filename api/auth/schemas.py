"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import Field, field_validator

from core.schemas import ApiModel
from users.schemas import UserProfileResponse

from .security import MAX_PASSWORD_BYTES


class RegisterRequest(ApiModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)
    bio: str | None = Field(default=None, max_length=1000)
    avatar_url: str | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(ApiModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(ApiModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(ApiModel):
    user: UserProfileResponse
    access_token: str
    token_type: str = "bearer"
