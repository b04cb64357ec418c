"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.

The repository and email sender are built once in the application
lifespan and kept on app.state; the services wrapping them are cheap
dataclasses created per request.
"""

from fastapi import Depends, Request

from src.config.settings import Settings, get_settings
from src.domain.authentication import AuthService
from src.domain.ports import AccountRepository, EmailSender
from src.domain.verification import VerificationService


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with, else the cached defaults."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_repository(request: Request) -> AccountRepository:
    """Get the account repository from app state."""
    return request.app.state.repository


def get_email_sender(request: Request) -> EmailSender:
    """Get the email sender from app state."""
    return request.app.state.email_sender


def get_verification_service(
    repository: AccountRepository = Depends(get_repository),
    email_sender: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_app_settings),
) -> VerificationService:
    """
    Create verification service with injected dependencies.

    Wires together the repository and email sender for the domain service.
    """
    return VerificationService(
        repository=repository,
        email_sender=email_sender,
        bcrypt_cost=settings.bcrypt_cost,
        subject=settings.verification_subject,
    )


def get_auth_service(
    repository: AccountRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    """Create login service with injected repository."""
    return AuthService(
        repository=repository,
        require_verified=settings.require_verified_login,
        bcrypt_cost=settings.bcrypt_cost,
    )
