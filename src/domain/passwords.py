"""
Password hashing - bcrypt wrappers shared by signup and login.

bcrypt only looks at the first 72 bytes of its input; current releases
refuse longer input outright, so the limit is checked here first.
"""

import bcrypt

MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode()) > MAX_PASSWORD_BYTES


def hash_password(password: str, cost: int = 10) -> str:
    """Hash password using bcrypt with the given cost factor."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=cost)).decode()


def check_password(password: str, password_hash: str) -> bool:
    """
    Compare a plaintext password against a stored bcrypt hash.

    Comparison is constant-time (bcrypt.checkpw). Passwords over the bcrypt
    limit can never have been stored, so they never match.
    """
    if password_too_long(password):
        return False
    return bcrypt.checkpw(password.encode(), password_hash.encode())
