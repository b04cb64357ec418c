"""
API routes - Signup, verification and login endpoints.

This module defines the HTTP endpoints:
- POST /api/signup - Create an account and send a verification code
- POST /api/verify-code - Verify the email with the code
- POST /api/resend-code - Replace the code and send it again
- POST /api/login - Check username and password

Routes are plain functions so that bcrypt and blocking store calls run in
FastAPI's threadpool instead of on the event loop. Domain errors are
translated by the handlers in src.api.errors.
"""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_auth_service, get_verification_service
from src.api.models import (
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    ResendCodeRequest,
    SignupRequest,
    VerifyCodeRequest,
)
from src.domain.authentication import AuthService
from src.domain.verification import VerificationService

router = APIRouter(tags=["accounts"])

_SERVER_ERROR = {"model": ErrorResponse, "description": "Server error"}


@router.post(
    "/signup",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields"},
        409: {"model": ErrorResponse, "description": "Username or email already exists"},
        500: _SERVER_ERROR,
    },
    summary="Create an account",
    description="Register a username, password and email. "
    "A 6-digit verification code is sent to the email.",
)
def signup(
    request_data: SignupRequest,
    service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    """
    Create an account in the pending state.

    - **username**: Unique username
    - **password**: Account password
    - **email**: Address that receives the verification code

    If the code cannot be delivered the account is still created;
    use resend-code to get a new one.
    """
    service.signup(request_data.username, request_data.password, request_data.email)
    return MessageResponse(message="User created successfully")


@router.post(
    "/verify-code",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields, already verified or invalid code"},
        404: {"model": ErrorResponse, "description": "Account not found"},
        500: _SERVER_ERROR,
    },
    summary="Verify email with code",
    description="Submit the 6-digit code received by email to verify the account.",
)
def verify_code(
    request_data: VerifyCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    service.verify_code(request_data.email, request_data.code)
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/resend-code",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing email or already verified"},
        404: {"model": ErrorResponse, "description": "Account not found"},
        500: _SERVER_ERROR,
    },
    summary="Resend verification code",
    description="Generate a new code, invalidating the previous one, and email it.",
)
def resend_code(
    request_data: ResendCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    service.resend_code(request_data.email)
    return MessageResponse(message="Verification code resent")


@router.post(
    "/login",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        500: _SERVER_ERROR,
    },
    summary="Log in",
    description="Check a username and password. No session or token is issued.",
)
def login(
    request_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    service.login(request_data.username, request_data.password)
    return MessageResponse(message="Login successful")
