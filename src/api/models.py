"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Missing fields are rejected here; blank values are rejected by the domain.
"""

from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    """Request model for account signup."""

    username: str = Field(..., description="Unique username")
    password: str = Field(..., description="Account password")
    email: EmailStr = Field(..., description="Address the verification code is sent to")


class VerifyCodeRequest(BaseModel):
    """Request model for email verification."""

    email: str = Field(..., description="Email address used at signup")
    code: str = Field(..., description="6-digit verification code")


class ResendCodeRequest(BaseModel):
    """Request model for requesting a fresh verification code."""

    email: str = Field(..., description="Email address used at signup")


class LoginRequest(BaseModel):
    """Request model for login."""

    username: str
    password: str


class MessageResponse(BaseModel):
    """Response model for successful operations."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
