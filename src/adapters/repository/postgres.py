"""
PostgreSQL credential store adapter - Implements AccountStore protocol.

This module provides the PostgreSQL implementation of the domain's
store ports using psycopg3 with raw SQL, for self-hosted deployments
and the integration test suite.

Write Semantics:
---------------
- set_active is an unconditional idempotent UPDATE; running it twice
  leaves the same row.
- create_user relies on the primary key and ON CONFLICT DO NOTHING,
  so concurrent enrollments of one identifier insert exactly one row.
- Soft-deleted rows are never updated; soft_delete only flags a row.

Connection failures and pool timeouts surface as UpstreamUnavailable.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import UpstreamUnavailable
from src.domain.ports import Role, UserRecord

logger = logging.getLogger(__name__)


class PostgresCredentialStore:
    """
    Implements CredentialStore and CredentialAdminStore via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        try:
            with self._pool.connection() as conn:
                yield conn
        except psycopg.OperationalError as e:
            # PoolTimeout is an OperationalError too
            logger.error("Credential store unreachable: %s", e)
            raise UpstreamUnavailable("credential store unreachable") from e

    def fetch_user_by_identifier(self, identifier: str) -> UserRecord | None:
        """
        Fetch a librarian row by normalized username.

        Soft-deleted rows are returned with deleted=True; the domain
        treats them like missing accounts.
        """
        sql = """
            SELECT username, pin_hash, active, role, require_pin_change, deleted
            FROM librarians
            WHERE username = %s
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identifier,))
            row = cursor.fetchone()

        if row is None:
            return None

        return UserRecord(
            identifier=row[0],
            credential_hash=row[1],
            active=row[2],
            role=Role(row[3]),
            require_credential_change=row[4],
            deleted=row[5],
        )

    def set_active(self, identifier: str) -> None:
        """Mark a non-deleted account active."""
        sql = """
            UPDATE librarians
            SET active = TRUE, updated_at = NOW()
            WHERE username = %s AND NOT deleted
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identifier,))
            conn.commit()

    def ping(self) -> None:
        """Validate database connectivity."""
        with self._connection() as conn:
            conn.execute("SELECT 1")

    def create_user(self, record: UserRecord) -> bool:
        """
        Insert a new librarian row.

        Returns:
            True if inserted, False if the username exists (deleted or not)
        """
        sql = """
            INSERT INTO librarians (username, pin_hash, active, role, require_pin_change)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (username) DO NOTHING
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    record.identifier,
                    record.credential_hash,
                    record.active,
                    record.role.value,
                    record.require_credential_change,
                ),
            )
            conn.commit()
            return cursor.rowcount == 1

    def replace_credential(
        self,
        identifier: str,
        credential_hash: str,
        active: bool,
        require_credential_change: bool,
    ) -> bool:
        """
        Overwrite PIN hash and status flags of a non-deleted account.

        Returns:
            True if a row was updated, False if there is no such account
        """
        sql = """
            UPDATE librarians
            SET pin_hash = %s, active = %s, require_pin_change = %s, updated_at = NOW()
            WHERE username = %s AND NOT deleted
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (credential_hash, active, require_credential_change, identifier))
            conn.commit()
            return cursor.rowcount == 1

    def soft_delete(self, identifier: str) -> bool:
        """
        Flag a non-deleted account deleted, inactive and due for a PIN change.

        Returns:
            True if a row was updated, False if there is no such account
        """
        sql = """
            UPDATE librarians
            SET deleted = TRUE, active = FALSE, require_pin_change = TRUE, updated_at = NOW()
            WHERE username = %s AND NOT deleted
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identifier,))
            conn.commit()
            return cursor.rowcount == 1

    def count_admins(self) -> int:
        """Count non-deleted admin accounts."""
        sql = "SELECT COUNT(*) FROM librarians WHERE role = %s AND NOT deleted"

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (Role.ADMIN.value,))
            row = cursor.fetchone()
            return row[0]


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
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
