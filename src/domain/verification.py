"""
Verification domain service - account signup and email-code state machine.

This module contains the core business logic for proving ownership of an
email address with a one-time numeric code.

Verification State Machine (Forward-Only Transitions)
=====================================================

States:
- Pending: account created, code outstanding
- Verified: terminal state after the code was presented

Valid Transitions:
    (none)  -> Pending   (signup)
    Pending -> Pending   (resend: new code replaces the old one)
    Pending -> Verified  (verify with the current code)

Invalid Transitions (never allowed):
    Verified -> any

Mail delivery happens after the account write. When delivery fails the
error reaches the caller, but the write is kept; resend is the recovery
path.
"""

import logging
import secrets
from dataclasses import dataclass

from .account import Account, Pending, Verified
from .exceptions import AccountConflict, AccountNotFound, AlreadyVerified, InvalidCode
from .passwords import hash_password
from .ports import AccountRepository, EmailSender
from .validation import require_fields, require_password_length

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


@dataclass
class VerificationService:
    """
    Domain service for signup and email verification.

    Orchestrates email normalization, password hashing, code generation,
    persistence and delivery of the verification code.
    """

    repository: AccountRepository
    email_sender: EmailSender
    bcrypt_cost: int = 10
    subject: str = "Your verification code"

    def signup(self, username: str, password: str, email: str) -> Account:
        """
        Create a new account in Pending state and mail it a code.

        Args:
            username: Desired username (unique)
            password: Plaintext password (will be hashed)
            email: User's email address (will be normalized)

        Returns:
            The created account

        Raises:
            ValidationFailed: If a field is missing or the password is too long
            AccountConflict: If the username or email is already taken
            DeliveryError: If the code could not be sent (account is kept)
        """
        require_fields(username=username, password=password, email=email)
        require_password_length(password)
        normalized_email = self._normalize_email(email)

        if self.repository.find_by_username(username) is not None:
            raise AccountConflict("username")

        code = self._generate_verification_code()
        account = self.repository.create(
            Account(
                username=username,
                email=normalized_email,
                password_hash=hash_password(password, self.bcrypt_cost),
                state=Pending(code),
            )
        )
        logger.info("Account created: username=%s", account.username)

        self._deliver_code(account.email, code)
        return account

    def verify_code(self, email: str, code: str) -> Account:
        """
        Consume the pending code and mark the account verified.

        Raises:
            ValidationFailed: If a field is missing
            AccountNotFound: If no account has this email
            AlreadyVerified: If the account is already verified
            InvalidCode: If the code does not match the pending code, or was
                replaced by a concurrent resend before it could be consumed
        """
        require_fields(email=email, code=code)
        account = self._pending_account(email)

        pending_code = account.state.code
        # Constant-time comparison
        if not secrets.compare_digest(pending_code.encode(), code.encode()):
            raise InvalidCode(account.email)

        account.state = Verified()
        # Fails if a resend or another verify changed the row since the read
        account = self.repository.save(account, expected_code=pending_code)
        logger.info("Account verified: username=%s", account.username)
        return account

    def resend_code(self, email: str) -> Account:
        """
        Replace the pending code with a fresh one and mail it.

        The previous code stops working as soon as the new one is saved,
        even if delivery of the new one then fails.

        Raises:
            ValidationFailed: If the email is missing
            AccountNotFound: If no account has this email
            AlreadyVerified: If the account is already verified (checked again
                at write time)
            DeliveryError: If the new code could not be sent
        """
        require_fields(email=email)
        account = self._pending_account(email)

        code = self._generate_verification_code()
        account.state = Pending(code)
        account = self.repository.save(account)
        logger.info("Verification code replaced: username=%s", account.username)

        self._deliver_code(account.email, code)
        return account

    def _pending_account(self, email: str) -> Account:
        normalized_email = self._normalize_email(email)
        account = self.repository.find_by_email(normalized_email)
        if account is None:
            raise AccountNotFound(normalized_email)
        if account.is_verified:
            raise AlreadyVerified(normalized_email)
        return account

    def _deliver_code(self, email: str, code: str) -> None:
        body = (
            f"Your verification code is: {code}\n\n"
            "Enter this code to confirm your email address. "
            "If you did not sign up, you can ignore this message."
        )
        self.email_sender.send(email, self.subject, body)

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _generate_verification_code(self) -> str:
        """
        Generate a uniformly random 6-digit verification code.

        Covers 000000-999999 inclusive. Uses the secrets module for
        cryptographic randomness and returns a string to keep leading zeros.
        """
        return f"{secrets.randbelow(10**CODE_LENGTH):0{CODE_LENGTH}d}"
