"""
Authentication domain service - credential check for returning users.

Login outcome is deliberately binary: an unknown username and a wrong
password raise the same InvalidCredentials, and a bcrypt comparison runs
in both cases so that response time does not reveal which one happened.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

from .exceptions import InvalidCredentials
from .passwords import check_password, hash_password
from .ports import AccountRepository
from .validation import require_fields

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _dummy_hash(cost: int) -> str:
    """
    bcrypt hash compared against when the username doesn't exist.

    Hashed at the same cost as stored passwords so both failure paths do
    the same amount of work. Computed once per cost.
    """
    return hash_password("dummy_password_for_timing_safety", cost=cost)


@dataclass
class AuthService:
    """Domain service for login."""

    repository: AccountRepository
    require_verified: bool = False
    bcrypt_cost: int = 10

    def __post_init__(self) -> None:
        _dummy_hash(self.bcrypt_cost)

    def login(self, username: str, password: str) -> None:
        """
        Check a username/password pair.

        Verification status is only enforced when `require_verified` is set;
        an unverified account is then rejected like a bad password.

        Raises:
            ValidationFailed: If a field is missing
            InvalidCredentials: Unknown username, wrong password, or
                (with require_verified) unverified account
        """
        require_fields(username=username, password=password)

        account = self.repository.find_by_username(username)
        stored_hash = account.password_hash if account is not None else _dummy_hash(self.bcrypt_cost)

        # Always run the comparison, even for unknown usernames
        password_valid = check_password(password, stored_hash)

        if account is None or not password_valid:
            logger.warning("Login failed: username=%s", username)
            raise InvalidCredentials(username)

        if self.require_verified and not account.is_verified:
            logger.warning("Login refused for unverified account: username=%s", username)
            raise InvalidCredentials(username)

        logger.info("Login succeeded: username=%s", username)
