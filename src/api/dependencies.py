"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

import secrets

from fastapi import Depends, Header, HTTPException, Request, status

from src.config.settings import Settings, get_settings
from src.domain.activation import ActivationService
from src.domain.administration import CredentialAdminService
from src.domain.credentials import CredentialChangeService
from src.domain.ports import AccountStore, CredentialHasher


def get_store(request: Request) -> AccountStore:
    """
    Get credential store from app state.

    The store is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.store


def get_hasher(request: Request) -> CredentialHasher:
    """Get the shared credential hasher from app state."""
    return request.app.state.hasher


def get_activation_service(
    request: Request, settings: Settings = Depends(get_settings)
) -> ActivationService:
    """
    Create activation service with injected dependencies.

    Wires together the store and hasher for the domain service.
    """
    return ActivationService(
        store=get_store(request),
        hasher=get_hasher(request),
        timeout_seconds=settings.upstream_timeout_seconds,
    )


def get_credential_change_service(
    request: Request, settings: Settings = Depends(get_settings)
) -> CredentialChangeService:
    """Create credential change service with injected dependencies."""
    return CredentialChangeService(
        store=get_store(request),
        hasher=get_hasher(request),
        timeout_seconds=settings.upstream_timeout_seconds,
        min_credential_length=settings.min_credential_length,
    )


def get_credential_admin_service(
    request: Request, settings: Settings = Depends(get_settings)
) -> CredentialAdminService:
    """Create administration service with injected dependencies."""
    return CredentialAdminService(
        store=get_store(request),
        hasher=get_hasher(request),
        timeout_seconds=settings.upstream_timeout_seconds,
    )


def require_admin_key(
    x_admin_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Guard administrative routes with the X-Admin-Key header.

    The key is compared in constant time. Without a configured key
    every administrative request is refused.
    """
    expected = settings.admin_api_key.get_secret_value() if settings.admin_api_key else ""
    supplied = x_admin_key or ""
    if not expected or not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
