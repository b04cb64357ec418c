"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from typing import Protocol

from .account import Account


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def find_by_username(self, username: str) -> Account | None:
        """
        Look up an account by username.

        Returns:
            The account, or None if no account has this username
        """
        ...

    def find_by_email(self, email: str) -> Account | None:
        """
        Look up an account by normalized email address.

        Returns:
            The account, or None if no account has this email
        """
        ...

    def create(self, account: Account) -> Account:
        """
        Atomically insert a new account.

        The uniqueness check on username and email must be part of the
        same atomic write, so that concurrent signups for the same identity
        produce exactly one account.

        Args:
            account: Account to insert (normally in Pending state)

        Returns:
            The stored account

        Raises:
            AccountConflict: If the username or email is already taken
            StoreError: On any backend failure
        """
        ...

    def save(self, account: Account, expected_code: str | None = None) -> Account:
        """
        Persist the verification state of a pending account.

        The write is a compare-and-swap: it only applies while the stored
        account is still pending and, when `expected_code` is given, still
        holds that code. Implementations must never move a verified account
        back to pending.

        Args:
            account: Account carrying its new verification state
            expected_code: Code the caller read before deciding the transition

        Returns:
            The stored account

        Raises:
            AccountNotFound: If the account does not exist
            AlreadyVerified: If the stored account is already verified
            InvalidCode: If the stored code is no longer `expected_code`
            StoreError: On any backend failure
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Deliver a plain-text message.

        Args:
            to_address: Recipient email address
            subject: Message subject line
            body: Plain-text message body

        Raises:
            DeliveryError: If the transport failed to accept the message
        """
        ...
