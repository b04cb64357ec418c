"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Concurrency Design:
-------------------
1. **Uniqueness**: UNIQUE constraints on username and email make the
   duplicate check part of the INSERT itself. Of several concurrent signups
   for the same identity exactly one INSERT succeeds; the others fail with
   UniqueViolation, reported as AccountConflict naming the clashing column.

2. **Compare-and-swap saves**: save() locks the row with SELECT FOR UPDATE,
   checks it is still pending and still holds the code the caller read,
   then updates it in the same transaction. A verify holding a code that a
   concurrent resend has replaced fails with InvalidCode, and a verified
   row is never written again.

3. **Schema check**: the accounts_code_only_while_pending CHECK constraint
   rejects any row that is verified and still carries a code.
"""

import logging
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.account import Account, Pending, Verified
from src.domain.exceptions import (
    AccountConflict,
    AccountNotFound,
    AlreadyVerified,
    InvalidCode,
    StoreError,
)

logger = logging.getLogger(__name__)

_EMAIL_CONSTRAINT = "accounts_email_key"

_COLUMNS = "username, email, password_hash, verification_code, is_verified"


def _row_to_account(row: tuple) -> Account:
    username, email, password_hash, code, is_verified = row
    return Account(
        username=username,
        email=email,
        password_hash=password_hash,
        state=Verified() if is_verified else Pending(code),
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_username(self, username: str) -> Account | None:
        return self._find_one(f"SELECT {_COLUMNS} FROM accounts WHERE username = %s", username)

    def find_by_email(self, email: str) -> Account | None:
        return self._find_one(f"SELECT {_COLUMNS} FROM accounts WHERE email = %s", email)

    def create(self, account: Account) -> Account:
        """
        Insert a new account; the UNIQUE constraints do the duplicate check.

        Raises:
            AccountConflict: field is "email" or "username" depending on
                which constraint was violated
            StoreError: On any other database failure
        """
        sql = """
            INSERT INTO accounts (username, email, password_hash, verification_code, is_verified, created_at)
            VALUES (%s, %s, %s, %s, %s, NOW())
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(
                    sql,
                    (
                        account.username,
                        account.email,
                        account.password_hash,
                        account.verification_code,
                        account.is_verified,
                    ),
                )
                conn.commit()
        except psycopg.errors.UniqueViolation as e:
            field = "email" if e.diag.constraint_name == _EMAIL_CONSTRAINT else "username"
            raise AccountConflict(field) from None
        except psycopg.Error as e:
            logger.error("Account insert failed: %s", e)
            raise StoreError("Account insert failed") from e

        return account

    def save(self, account: Account, expected_code: str | None = None) -> Account:
        """
        Persist the account's verification state as a compare-and-swap.

        Uses SELECT FOR UPDATE to lock the row, checks that it is still
        pending (and still holds `expected_code` when one is given), then
        writes the new state in the same transaction. A verify and a resend
        racing on one account are serialized on the row lock: whichever
        commits second sees the first one's write.

        Raises:
            AccountNotFound: If no row has this username
            AlreadyVerified: If the row is already verified
            InvalidCode: If the row's code is no longer `expected_code`
            StoreError: On any database failure
        """
        select_sql = """
            SELECT is_verified, verification_code
            FROM accounts
            WHERE username = %s
            FOR UPDATE
        """

        update_sql = f"""
            UPDATE accounts
            SET verification_code = %(code)s,
                is_verified = %(verified)s,
                verified_at = CASE WHEN %(verified)s THEN NOW() ELSE NULL END
            WHERE username = %(username)s AND NOT is_verified
            RETURNING {_COLUMNS}
        """
        params = {
            "code": account.verification_code,
            "verified": account.is_verified,
            "username": account.username,
        }

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(select_sql, (account.username,))
                current = cursor.fetchone()

                if current is None:
                    raise AccountNotFound(account.username)
                is_verified, stored_code = current
                if is_verified:
                    raise AlreadyVerified(account.email)
                if expected_code is not None and stored_code != expected_code:
                    raise InvalidCode(account.email)

                cursor.execute(update_sql, params)
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as e:
            logger.error("Account update failed: %s", e)
            raise StoreError("Account update failed") from e

        return _row_to_account(row)

    def _find_one(self, sql: str, value: str) -> Account | None:
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (value,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error("Account lookup failed: %s", e)
            raise StoreError("Account lookup failed") from e

        return _row_to_account(row) if row is not None else None


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
        logger.info("Migration complete: %s", sql_file.name)
