"""Input checks shared by the domain services."""

from .exceptions import ValidationFailed
from .passwords import password_too_long


def require_fields(**fields: str | None) -> None:
    """Raise ValidationFailed if any field is None, empty or whitespace-only."""
    missing = [name for name, value in fields.items() if value is None or not value.strip()]
    if missing:
        raise ValidationFailed("Missing fields")


def require_password_length(password: str) -> None:
    if password_too_long(password):
        raise ValidationFailed("Password too long")
