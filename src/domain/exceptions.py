"""
Domain exceptions - Semantic error types for the account lifecycle.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each of them to an HTTP status.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    pass


class ValidationFailed(AccountError):
    """Required input is missing or malformed."""

    def __init__(self, message: str = "Missing fields") -> None:
        self.message = message
        super().__init__(message)


class AccountConflict(AccountError):
    """Username or email is already taken by another account."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} already exists")


class AccountNotFound(AccountError):
    """No account matches the given identity."""

    pass


class AlreadyVerified(AccountError):
    """Account has already completed email verification."""

    pass


class InvalidCode(AccountError):
    """Supplied verification code does not match the pending code."""

    pass


class InvalidCredentials(AccountError):
    """Unknown username or wrong password (deliberately indistinguishable)."""

    pass


class DeliveryError(AccountError):
    """Mail transport failed to deliver a message."""

    pass


class StoreError(AccountError):
    """Account store failed for a reason unrelated to business rules."""

    pass
