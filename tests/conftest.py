"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Test settings that do not depend on the environment
- PostgreSQL connection pool with migrations (skips when unreachable)
- Seeding librarian rows
"""

from collections.abc import Callable, Generator

import bcrypt
import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.config.settings import Settings

TEST_ADMIN_KEY = "test-admin-key"


@pytest.fixture
def settings() -> Settings:
    """Settings for API tests, independent of .env and process environment."""
    return Settings(
        _env_file=None,
        store_backend="postgres",
        admin_api_key=TEST_ADMIN_KEY,
        upstream_timeout_seconds=1.0,
        bcrypt_cost=4,
    )


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool against DATABASE_URL, skipping when unreachable."""
    database_url = Settings(_env_file=None, store_backend="postgres").database_url
    try:
        with psycopg.connect(database_url, connect_timeout=2):
            pass
    except psycopg.OperationalError:
        pytest.skip("PostgreSQL is not reachable")

    pool = ConnectionPool(
        conninfo=database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean librarians table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM librarians")
        conn.commit()
    yield


@pytest.fixture
def create_librarian(pool: ConnectionPool, clean_database: None) -> Callable[..., None]:
    """Factory inserting librarian rows with bcrypt-hashed PINs into a clean table."""

    def _create(
        username: str,
        pin: str,
        active: bool = False,
        deleted: bool = False,
        role: str = "librarian",
    ) -> None:
        pin_hash = bcrypt.hashpw(pin.encode(), bcrypt.gensalt(4)).decode()
        with pool.connection() as conn:
            conn.execute(
                "INSERT INTO librarians (username, pin_hash, active, deleted, role) "
                "VALUES (%s, %s, %s, %s, %s)",
                (username, pin_hash, active, deleted, role),
            )
            conn.commit()

    return _create
