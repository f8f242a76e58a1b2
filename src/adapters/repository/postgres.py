"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Uniqueness of username and email is enforced by UNIQUE constraints on the
accounts table. A duplicate-creation race therefore fails inside the
database and surfaces as AccountConflict, the same error the service
raises from its own pre-check. Any other psycopg failure is reported as
StorageError without leaking driver details to the caller.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.account import Account
from src.domain.exceptions import AccountConflict, AlreadyVerified, StorageError

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, username, email, password_hash, verified, pending_otp, otp_expires_at,
    otp_attempt_count, last_otp_issued_at, created_at
"""


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

    def get_by_id(self, account_id: str) -> Account | None:
        try:
            key = uuid.UUID(str(account_id))
        except ValueError:
            return None
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE id = %s", (key,))

    def get_by_email(self, email: str) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE email = %s", (email,))

    def find_by_email_or_username(self, email: str, username: str) -> Account | None:
        """Email match sorts first so it wins over a username-only match."""
        sql = f"""
            SELECT {_COLUMNS} FROM accounts
            WHERE email = %s OR username = %s
            ORDER BY (email = %s) DESC
            LIMIT 1
        """
        return self._fetch_one(sql, (email, username, email))

    def create(self, account: Account) -> Account:
        """
        Insert a new account; the database assigns id and created_at.

        Raises:
            AccountConflict: If username or email violates a UNIQUE constraint
        """
        sql = f"""
            INSERT INTO accounts (
                username, email, password_hash, verified, pending_otp,
                otp_expires_at, otp_attempt_count, last_otp_issued_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_COLUMNS}
        """
        params = (
            account.username,
            account.email,
            account.password_hash,
            account.verified,
            account.pending_otp,
            account.otp_expires_at,
            account.otp_attempt_count,
            account.last_otp_issued_at,
        )
        with self._cursor() as (conn, cursor):
            cursor.execute(sql, params)
            row = cursor.fetchone()
            conn.commit()
        return _to_account(row)

    def save(self, account: Account) -> None:
        """
        Update mutable fields of an existing account.

        An unverified snapshot only applies while the row is still
        unverified, so a stale reissue cannot undo a concurrent verification.

        Raises:
            AlreadyVerified: If the row was verified after the snapshot was read
        """
        sql = """
            UPDATE accounts
            SET password_hash = %s,
                verified = %s,
                pending_otp = %s,
                otp_expires_at = %s,
                otp_attempt_count = %s,
                last_otp_issued_at = %s
            WHERE id = %s AND (%s OR NOT verified)
        """
        params = (
            account.password_hash,
            account.verified,
            account.pending_otp,
            account.otp_expires_at,
            account.otp_attempt_count,
            account.last_otp_issued_at,
            uuid.UUID(account.id),
            account.verified,
        )
        with self._cursor() as (conn, cursor):
            cursor.execute(sql, params)
            updated = cursor.rowcount
            conn.commit()
        if updated == 0:
            logger.info("Stale save rejected for verified account %s", account.id)
            raise AlreadyVerified()

    def delete(self, account_id: str) -> None:
        with self._cursor() as (conn, cursor):
            cursor.execute("DELETE FROM accounts WHERE id = %s", (uuid.UUID(account_id),))
            conn.commit()

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> Account | None:
        with self._cursor() as (conn, cursor):
            cursor.execute(sql, params)
            row = cursor.fetchone()
            conn.commit()
        return _to_account(row) if row is not None else None

    @contextmanager
    def _cursor(self) -> Iterator[tuple[psycopg.Connection, psycopg.Cursor]]:
        """Yield a pooled connection and dict cursor, translating driver errors."""
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                yield conn, cursor
        except psycopg.errors.UniqueViolation as e:
            logger.info("Account uniqueness violation: %s", e.diag.constraint_name)
            raise AccountConflict("User already exists") from e
        except psycopg.Error as e:
            logger.error("Account storage failure: %s", e)
            raise StorageError() from e


def _to_account(row: dict[str, Any]) -> Account:
    return Account(
        id=str(row["id"]),
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        verified=row["verified"],
        pending_otp=row["pending_otp"],
        otp_expires_at=row["otp_expires_at"],
        otp_attempt_count=row["otp_attempt_count"],
        last_otp_issued_at=row["last_otp_issued_at"],
        created_at=row["created_at"],
    )


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Find migrations directory relative to this file
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
