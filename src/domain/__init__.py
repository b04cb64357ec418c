"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account verification state machine and the
login check. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .account import Account, Pending, VerificationState, Verified
from .authentication import AuthService
from .exceptions import (
    AccountConflict,
    AccountError,
    AccountNotFound,
    AlreadyVerified,
    DeliveryError,
    InvalidCode,
    InvalidCredentials,
    StoreError,
    ValidationFailed,
)
from .ports import AccountRepository, EmailSender
from .verification import VerificationService

__all__ = [
    "Account",
    "AccountConflict",
    "AccountError",
    "AccountNotFound",
    "AccountRepository",
    "AlreadyVerified",
    "AuthService",
    "DeliveryError",
    "EmailSender",
    "InvalidCode",
    "InvalidCredentials",
    "Pending",
    "StoreError",
    "ValidationFailed",
    "VerificationService",
    "VerificationState",
    "Verified",
]
