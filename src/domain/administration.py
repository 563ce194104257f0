"""
Administration domain service - librarian enrollment, PIN reset and deletion.

Administrators are trusted callers (authenticated by the API layer),
so unlike the self-service operations these report AccountNotFound,
IdentifierTaken and AccountAlreadyDeleted distinctly.

Temporary Credentials
=====================
Enrollment and reset both issue a random 4-digit PIN, store only its
bcrypt hash, and flag the account with require_credential_change.
A reset also deactivates the account, so the librarian must activate
again with the new PIN before changing it.

Deletion
========
Deletion is soft: the row stays, flagged deleted, so the identifier
is never reissued and every self-service path treats it as missing.
The last remaining administrator cannot be deleted. The count and the
write are separate calls, so two concurrent deletions of the last two
administrators can both pass the check.
"""

import logging
import secrets
from dataclasses import dataclass

from .activation import is_valid_text, normalize_identifier
from .exceptions import (
    AccountAlreadyDeleted,
    AccountNotFound,
    IdentifierTaken,
    InvalidInput,
    LastAdminRemoval,
)
from .ports import AccountStore, CredentialHasher, Role, UserRecord
from .upstream import call_bounded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemporaryCredential:
    """A freshly issued PIN, handed once to the administrator."""

    identifier: str
    credential: str


@dataclass
class CredentialAdminService:
    """Domain service for administrator-driven account management."""

    store: AccountStore
    hasher: CredentialHasher
    timeout_seconds: float = 5.0

    def enroll(self, identifier: str, role: str = Role.LIBRARIAN.value) -> TemporaryCredential:
        """
        Create an inactive account with a temporary PIN.

        Args:
            identifier: Username (will be normalized)
            role: "admin" or "librarian"

        Raises:
            InvalidInput: If the identifier is empty or the role unknown
            IdentifierTaken: If an account with this identifier exists
            UpstreamUnavailable: If a collaborator fails or times out
        """
        normalized = normalize_identifier(identifier or "")
        if not is_valid_text(normalized):
            raise InvalidInput("identifier is required")
        try:
            account_role = Role(role)
        except ValueError:
            raise InvalidInput(f"unknown role {role!r}") from None

        pin = self._generate_temporary_credential()
        credential_hash = call_bounded(self.timeout_seconds, self.hasher.hash, pin)
        record = UserRecord(
            identifier=normalized,
            credential_hash=credential_hash,
            active=False,
            role=account_role,
            require_credential_change=True,
        )

        created = call_bounded(self.timeout_seconds, self.store.create_user, record)
        if not created:
            raise IdentifierTaken(normalized)

        logger.info("Enrolled %s account %s", account_role.value, normalized)
        return TemporaryCredential(identifier=normalized, credential=pin)

    def reset_credential(self, identifier: str) -> TemporaryCredential:
        """
        Issue a new temporary PIN and deactivate the account.

        Raises:
            InvalidInput: If the identifier is empty
            AccountNotFound: If there is no non-deleted account
            UpstreamUnavailable: If a collaborator fails or times out
        """
        normalized = normalize_identifier(identifier or "")
        if not is_valid_text(normalized):
            raise InvalidInput("identifier is required")

        pin = self._generate_temporary_credential()
        credential_hash = call_bounded(self.timeout_seconds, self.hasher.hash, pin)

        updated = call_bounded(
            self.timeout_seconds,
            self.store.replace_credential,
            normalized,
            credential_hash,
            False,
            True,
        )
        if not updated:
            raise AccountNotFound(normalized)

        logger.info("Credential reset for account %s", normalized)
        return TemporaryCredential(identifier=normalized, credential=pin)

    def delete(self, identifier: str) -> str:
        """
        Soft-delete an account.

        Returns:
            Normalized identifier

        Raises:
            InvalidInput: If the identifier is empty
            AccountNotFound: If there is no account with this identifier
            AccountAlreadyDeleted: If the account is already deleted
            LastAdminRemoval: If the account is the only remaining administrator
            UpstreamUnavailable: If a collaborator fails or times out
        """
        normalized = normalize_identifier(identifier or "")
        if not is_valid_text(normalized):
            raise InvalidInput("identifier is required")

        record = call_bounded(self.timeout_seconds, self.store.fetch_user_by_identifier, normalized)
        if record is None:
            raise AccountNotFound(normalized)
        if record.deleted:
            raise AccountAlreadyDeleted(normalized)

        if record.role is Role.ADMIN:
            admins = call_bounded(self.timeout_seconds, self.store.count_admins)
            if admins <= 1:
                logger.warning("Refused to delete the last admin account %s", normalized)
                raise LastAdminRemoval(normalized)

        deleted = call_bounded(self.timeout_seconds, self.store.soft_delete, normalized)
        if not deleted:
            # Deleted by someone else between read and write
            raise AccountAlreadyDeleted(normalized)

        logger.info("Deleted %s account %s", record.role.value, normalized)
        return normalized

    def _generate_temporary_credential(self) -> str:
        """
        Generate a cryptographically secure 4-digit PIN.

        Returns string to preserve leading zeros.
        """
        return "".join(secrets.choice("0123456789") for _ in range(4))
