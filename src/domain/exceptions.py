"""
Domain exceptions - Semantic error types for librarian accounts.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Messages are meant for logs; the API layer never echoes them to callers.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    pass


class InvalidInput(AccountError):
    """Request is malformed (empty identifier, empty credential, bad role)."""

    pass


class AuthenticationFailed(AccountError):
    """Unknown account, deleted account, or credential mismatch.

    Deliberately a single type: callers must not be able to tell which
    check failed.
    """

    pass


class UpstreamUnavailable(AccountError):
    """Credential store or hashing utility timed out or failed. Retryable."""

    pass


class IdentifierTaken(AccountError):
    """An account with this identifier already exists."""

    pass


class AccountNotFound(AccountError):
    """No account with this identifier (administrative operations only)."""

    pass


class AccountAlreadyDeleted(AccountError):
    """The account exists but was already soft-deleted (administrative only)."""

    pass


class LastAdminRemoval(AccountError):
    """Deleting this account would leave the library without an administrator."""

    pass
