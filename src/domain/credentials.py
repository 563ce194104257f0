"""
Credential change domain service.

An activated librarian replaces the temporary PIN issued at enrollment
or reset. The same generic AuthenticationFailed covers unknown accounts,
wrong current PINs and accounts that were never activated.
"""

import logging
from dataclasses import dataclass

from .activation import authenticate, is_valid_text, normalize_identifier
from .exceptions import AuthenticationFailed, InvalidInput
from .ports import AccountStore, CredentialHasher
from .upstream import call_bounded

logger = logging.getLogger(__name__)


@dataclass
class CredentialChangeService:
    """Domain service for self-service credential replacement."""

    store: AccountStore
    hasher: CredentialHasher
    timeout_seconds: float = 5.0
    min_credential_length: int = 4

    def change_credential(
        self, identifier: str, current_credential: str, new_credential: str
    ) -> str:
        """
        Replace the credential of an active account.

        Clears the require_credential_change flag set by enrollment and reset.

        Returns:
            Normalized identifier

        Raises:
            InvalidInput: If a field is empty, not valid text, or the new
                credential is too short
            AuthenticationFailed: If the account is unknown, inactive,
                or the current credential is wrong
            UpstreamUnavailable: If a collaborator fails or times out
        """
        normalized = normalize_identifier(identifier or "")
        if not all(
            is_valid_text(value) for value in (normalized, current_credential, new_credential)
        ):
            raise InvalidInput("identifier, current and new credential are required")
        if len(new_credential) < self.min_credential_length:
            raise InvalidInput("new credential is too short")

        record = authenticate(
            self.store, self.hasher, normalized, current_credential, self.timeout_seconds
        )
        if not record.active:
            logger.info("Credential change refused for inactive account %s", normalized)
            raise AuthenticationFailed(f"account {normalized} is not active")

        new_hash = call_bounded(self.timeout_seconds, self.hasher.hash, new_credential)
        updated = call_bounded(
            self.timeout_seconds,
            self.store.replace_credential,
            normalized,
            new_hash,
            True,
            False,
        )
        if not updated:
            # Deleted between read and write
            raise AuthenticationFailed(f"account {normalized} vanished during update")

        logger.info("Credential changed for account %s", normalized)
        return normalized
