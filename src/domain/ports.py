"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Role(str, Enum):
    """Librarian roles."""

    ADMIN = "admin"
    LIBRARIAN = "librarian"


@dataclass(frozen=True)
class UserRecord:
    """
    Librarian account as held by the credential store.

    credential_hash is opaque to the domain: it is only ever handed
    back to the CredentialHasher for comparison.
    """

    identifier: str
    credential_hash: str
    active: bool = False
    role: Role = Role.LIBRARIAN
    require_credential_change: bool = True
    deleted: bool = False


class CredentialStore(Protocol):
    """Port interface for the account lookups and writes used by activation."""

    def fetch_user_by_identifier(self, identifier: str) -> UserRecord | None:
        """
        Fetch an account by its normalized identifier.

        Returns:
            The record, or None when no account exists

        Raises:
            UpstreamUnavailable: If the store cannot be reached
        """
        ...

    def set_active(self, identifier: str) -> None:
        """
        Mark an account active.

        Setting an already-active account active again is a no-op.

        Raises:
            UpstreamUnavailable: If the store cannot be reached
        """
        ...

    def ping(self) -> None:
        """
        Cheap round-trip to confirm the store is reachable.

        Raises:
            UpstreamUnavailable: If the store cannot be reached
        """
        ...


class CredentialAdminStore(Protocol):
    """Port interface for enrollment, credential replacement and deletion."""

    def create_user(self, record: UserRecord) -> bool:
        """
        Insert a new account.

        Returns:
            True if inserted, False if the identifier is already taken
        """
        ...

    def replace_credential(
        self,
        identifier: str,
        credential_hash: str,
        active: bool,
        require_credential_change: bool,
    ) -> bool:
        """
        Overwrite an account's credential hash and status flags.

        Returns:
            True if a non-deleted account was updated, False otherwise
        """
        ...

    def soft_delete(self, identifier: str) -> bool:
        """
        Mark an account deleted, inactive and flagged for a PIN change.

        The row is kept so the identifier cannot be enrolled again.

        Returns:
            True if a non-deleted account was updated, False otherwise
        """
        ...

    def count_admins(self) -> int:
        """Count non-deleted accounts with the admin role."""
        ...


class AccountStore(CredentialStore, CredentialAdminStore, Protocol):
    """Both store ports, as implemented by the shipped adapters."""


class CredentialHasher(Protocol):
    """Port interface for one-way credential hashing."""

    @property
    def dummy_hash(self) -> str:
        """Hash compared against when no account exists (timing equalization)."""
        ...

    def hash(self, credential: str) -> str:
        """Hash a plaintext credential."""
        ...

    def verify(self, credential: str, credential_hash: str) -> bool:
        """
        Compare a plaintext credential with a stored hash in constant time.

        Raises:
            UpstreamUnavailable: If the stored hash is malformed
        """
        ...
