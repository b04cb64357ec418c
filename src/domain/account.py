"""
Account entity and its verification state.

Verification state is a tagged variant rather than an optional code plus a
boolean flag, so a verified account carrying a code cannot be constructed.

State Transitions (forward-only):
- Pending(code) -> Pending(new_code)  (resend)
- Pending(code) -> Verified           (successful verification)

Verified is terminal.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Pending:
    """Verification outstanding; `code` is the only code that will be accepted."""

    code: str


@dataclass(frozen=True)
class Verified:
    """Email ownership proven. Terminal state."""


VerificationState = Pending | Verified


@dataclass
class Account:
    """A registered identity."""

    username: str
    email: str
    password_hash: str
    state: VerificationState

    @property
    def is_verified(self) -> bool:
        return isinstance(self.state, Verified)

    @property
    def verification_code(self) -> str | None:
        """Pending code, or None once verified."""
        if isinstance(self.state, Pending):
            return self.state.code
        return None
