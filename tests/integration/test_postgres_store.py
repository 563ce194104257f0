"""
Integration tests for PostgresCredentialStore.

Tests store operations against a real PostgreSQL database.
Skipped when DATABASE_URL is not reachable.
"""

from collections.abc import Callable

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresCredentialStore, run_migrations
from src.domain.ports import Role, UserRecord

pytestmark = pytest.mark.integration


@pytest.fixture
def store(pool: ConnectionPool, clean_database: None) -> PostgresCredentialStore:
    """Create store instance for each test."""
    return PostgresCredentialStore(pool)


class TestFetchUser:
    """Tests for fetch_user_by_identifier."""

    def test_fetch_existing(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """Seeded row maps onto UserRecord."""
        create_librarian("abebe", "1234", role="admin")

        record = store.fetch_user_by_identifier("abebe")

        assert record is not None
        assert record.identifier == "abebe"
        assert record.credential_hash.startswith("$2b$")
        assert record.active is False
        assert record.role is Role.ADMIN
        assert record.require_credential_change is True
        assert record.deleted is False

    def test_fetch_missing_returns_none(self, store: PostgresCredentialStore) -> None:
        """Unknown username returns None."""
        assert store.fetch_user_by_identifier("nobody") is None

    def test_fetch_deleted_is_flagged(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """Soft-deleted rows come back flagged."""
        create_librarian("gone", "1234", deleted=True)

        record = store.fetch_user_by_identifier("gone")

        assert record is not None
        assert record.deleted is True


class TestSetActive:
    """Tests for set_active."""

    def test_set_active_activates(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """set_active flips the flag."""
        create_librarian("abebe", "1234")

        store.set_active("abebe")

        assert store.fetch_user_by_identifier("abebe").active is True

    def test_set_active_is_idempotent(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """Applying set_active twice leaves the same state."""
        create_librarian("abebe", "1234")

        store.set_active("abebe")
        store.set_active("abebe")

        assert store.fetch_user_by_identifier("abebe").active is True

    def test_set_active_skips_deleted(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """Deleted accounts are never activated."""
        create_librarian("gone", "1234", deleted=True)

        store.set_active("gone")

        assert store.fetch_user_by_identifier("gone").active is False


class TestAdminWrites:
    """Tests for create_user, replace_credential and deletion."""

    def test_create_user_inserts(self, store: PostgresCredentialStore) -> None:
        """A new username is inserted."""
        record = UserRecord(identifier="dawit", credential_hash="$2b$04$hash", role=Role.ADMIN)

        assert store.create_user(record) is True
        assert store.fetch_user_by_identifier("dawit") == record

    def test_create_user_duplicate_returns_false(self, store: PostgresCredentialStore) -> None:
        """Inserting an existing username returns False (not exception)."""
        record = UserRecord(identifier="dawit", credential_hash="$2b$04$hash")

        assert store.create_user(record) is True
        assert store.create_user(record) is False

    def test_replace_credential_updates(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """Hash and flags are overwritten."""
        create_librarian("abebe", "1234", active=True)

        assert store.replace_credential("abebe", "$2b$04$new", False, True) is True

        record = store.fetch_user_by_identifier("abebe")
        assert record.credential_hash == "$2b$04$new"
        assert record.active is False
        assert record.require_credential_change is True

    def test_replace_credential_missing_returns_false(self, store: PostgresCredentialStore) -> None:
        """Unknown username returns False."""
        assert store.replace_credential("nobody", "$2b$04$new", True, False) is False

    def test_replace_credential_deleted_returns_false(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """Deleted accounts are not updated."""
        create_librarian("gone", "1234", deleted=True)

        assert store.replace_credential("gone", "$2b$04$new", True, False) is False

    def test_soft_delete_flags_row(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """The row stays, deleted, inactive and due for a PIN change."""
        create_librarian("abebe", "1234", active=True)

        assert store.soft_delete("abebe") is True

        record = store.fetch_user_by_identifier("abebe")
        assert record.deleted is True
        assert record.active is False
        assert record.require_credential_change is True

    def test_soft_delete_twice_returns_false(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """An already deleted or missing account is not updated."""
        create_librarian("abebe", "1234")

        assert store.soft_delete("abebe") is True
        assert store.soft_delete("abebe") is False
        assert store.soft_delete("nobody") is False

    def test_count_admins_ignores_librarians_and_deleted(
        self, store: PostgresCredentialStore, create_librarian: Callable[..., None]
    ) -> None:
        """Only non-deleted admins are counted."""
        create_librarian("selam", "1234", role="admin")
        create_librarian("mulu", "1234", role="admin", deleted=True)
        create_librarian("abebe", "1234")

        assert store.count_admins() == 1


class TestMigrations:
    """Tests for run_migrations."""

    def test_migrations_are_idempotent(self, pool: ConnectionPool) -> None:
        """Running migrations again does not fail."""
        run_migrations(pool)
        run_migrations(pool)

    def test_ping(self, store: PostgresCredentialStore) -> None:
        """ping succeeds against a live database."""
        store.ping()
