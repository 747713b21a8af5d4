"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import BaseModel, EmailStr, Field

from src.domain.models import PublicProfile, TokenPair


class SignUpRequest(BaseModel):
    """Request model for user registration."""

    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr
    password: str = Field(..., min_length=1, description="User password")


class VerifyEmailRequest(BaseModel):
    """Request model for email verification (values from the emailed link)."""

    id: str = Field(..., min_length=1, description="User id from the verification link")
    token: str = Field(..., min_length=1, description="Token from the verification link")


class SignInRequest(BaseModel):
    """Request model for credential sign-in."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    """Request model for refresh token rotation."""

    refresh_token: str | None = Field(default=None, description="Current refresh token")


class MessageResponse(BaseModel):
    """Generic acknowledgment."""

    message: str


class ProfileModel(BaseModel):
    """Public user profile. Never includes the password hash."""

    id: str
    email: str
    name: str
    verified: bool

    @classmethod
    def from_domain(cls, profile: PublicProfile) -> "ProfileModel":
        return cls(id=profile.id, email=profile.email, name=profile.name, verified=profile.verified)


class TokensModel(BaseModel):
    """Access and refresh token pair."""

    access: str
    refresh: str

    @classmethod
    def from_domain(cls, tokens: TokenPair) -> "TokensModel":
        return cls(access=tokens.access, refresh=tokens.refresh)


class SignInResponse(BaseModel):
    """Response model for successful sign-in."""

    profile: ProfileModel
    tokens: TokensModel


class RefreshResponse(BaseModel):
    """Response model for successful refresh rotation."""

    tokens: TokensModel


class ProfileResponse(BaseModel):
    """Response model for the caller's profile."""

    profile: ProfileModel


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
