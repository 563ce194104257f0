"""
Domain layer - Pure business logic with zero framework imports.

This package contains the librarian account rules: activation,
credential change and administrator enrollment. It defines its own
port interfaces for the credential store and the hashing utility,
so the hosted backend and bcrypt stay behind adapters.
"""

from .activation import ActivationService, is_valid_text, normalize_identifier
from .administration import CredentialAdminService, TemporaryCredential
from .credentials import CredentialChangeService
from .exceptions import (
    AccountAlreadyDeleted,
    AccountError,
    AccountNotFound,
    AuthenticationFailed,
    IdentifierTaken,
    InvalidInput,
    LastAdminRemoval,
    UpstreamUnavailable,
)
from .ports import (
    AccountStore,
    CredentialAdminStore,
    CredentialHasher,
    CredentialStore,
    Role,
    UserRecord,
)

__all__ = [
    "AccountAlreadyDeleted",
    "AccountError",
    "AccountNotFound",
    "AccountStore",
    "ActivationService",
    "AuthenticationFailed",
    "CredentialAdminService",
    "CredentialAdminStore",
    "CredentialChangeService",
    "CredentialHasher",
    "CredentialStore",
    "IdentifierTaken",
    "InvalidInput",
    "LastAdminRemoval",
    "Role",
    "TemporaryCredential",
    "UpstreamUnavailable",
    "UserRecord",
    "is_valid_text",
    "normalize_identifier",
]
