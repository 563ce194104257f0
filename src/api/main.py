"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from psycopg_pool import ConnectionPool

from src.adapters.hashing import BcryptHasher
from src.adapters.repository.postgres import PostgresCredentialStore, run_migrations
from src.adapters.repository.supabase import SupabaseCredentialStore, create_supabase_client
from src.api.errors import SERVICE_UNAVAILABLE, install_error_handlers
from src.api.v1 import router as v1_router
from src.config.logging_config import configure_logging
from src.config.settings import Settings, get_settings
from src.domain.exceptions import UpstreamUnavailable
from src.domain.upstream import call_bounded

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Church Library Account API v1 - Activate and manage librarian accounts",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Loads settings (invalid configuration aborts startup)
    - Opens the credential store connection (HTTP client or pool)
    - Runs migrations for the PostgreSQL backend
    - Closes the connection on shutdown
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Starting application with %s credential store...", settings.store_backend)

    if settings.store_backend == "postgres":
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            timeout=settings.upstream_timeout_seconds,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.store = PostgresCredentialStore(pool)
        close = pool.close
    else:
        client = create_supabase_client(
            settings.supabase_url,
            settings.supabase_service_role_key.get_secret_value(),
            settings.upstream_timeout_seconds,
        )
        app.state.store = SupabaseCredentialStore(client, settings.supabase_table)
        close = client.close

    app.state.hasher = BcryptHasher(cost=settings.bcrypt_cost)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    close()
    logger.info("Credential store connection closed")


app = FastAPI(
    title="church-library-accounts",
    description="Church Library Account API - Librarian activation, PIN change and enrollment",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

install_error_handlers(app)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(
    request: Request, settings: Settings = Depends(get_settings)
) -> dict[str, str]:
    """
    Health check endpoint with credential store validation.

    Returns 200 OK if application and store are healthy,
    503 if the store cannot be reached in time.
    """
    store = request.app.state.store
    try:
        await run_in_threadpool(call_bounded, settings.upstream_timeout_seconds, store.ping)
    except UpstreamUnavailable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SERVICE_UNAVAILABLE,
        ) from None

    return {"status": "healthy"}
