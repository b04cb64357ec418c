"""
In-memory repository adapter - Implements AccountRepository protocol.

Dict-backed store for development and tests. A single lock serializes
every read-modify-write, which gives the same guarantees the PostgreSQL
adapter gets from UNIQUE constraints and conditional updates:
exactly one winner for concurrent signups, at most one successful
verification per code, and no verified account ever reverts to pending.
"""

import threading
from dataclasses import replace

from src.domain.account import Account
from src.domain.exceptions import AccountConflict, AccountNotFound, AlreadyVerified, InvalidCode


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with process-local dicts.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Stored accounts are copied on the way in and out so callers cannot
    mutate shared state without going through save().
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_username: dict[str, Account] = {}
        self._username_by_email: dict[str, str] = {}

    def find_by_username(self, username: str) -> Account | None:
        with self._lock:
            account = self._by_username.get(username)
            return replace(account) if account is not None else None

    def find_by_email(self, email: str) -> Account | None:
        with self._lock:
            username = self._username_by_email.get(email)
            if username is None:
                return None
            return replace(self._by_username[username])

    def create(self, account: Account) -> Account:
        with self._lock:
            if account.username in self._by_username:
                raise AccountConflict("username")
            if account.email in self._username_by_email:
                raise AccountConflict("email")
            self._by_username[account.username] = replace(account)
            self._username_by_email[account.email] = account.username
            return replace(account)

    def save(self, account: Account, expected_code: str | None = None) -> Account:
        with self._lock:
            stored = self._by_username.get(account.username)
            if stored is None:
                raise AccountNotFound(account.username)
            if stored.is_verified:
                raise AlreadyVerified(stored.email)
            if expected_code is not None and stored.verification_code != expected_code:
                raise InvalidCode(stored.email)
            stored.state = account.state
            return replace(stored)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_username)
