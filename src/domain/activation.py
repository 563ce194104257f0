"""
Activation domain service - librarian account activation.

A librarian receives a temporary PIN from an administrator, then
activates the account from the mobile app by submitting identifier
and PIN. Activation is a single linear sequence:

    validate input -> fetch record -> constant-time compare -> set active

Enumeration Resistance
======================
Unknown, deleted, and wrong-credential attempts all raise the same
AuthenticationFailed, and all of them run one bcrypt comparison
(against a dummy hash when there is no record), so neither the
response nor its timing tells the caller whether the account exists.

Concurrency
===========
The read and the conditional write are not atomic. Two concurrent
activations of the same inactive account may both call set_active;
the write sets the same final value, so the race is harmless and
at worst costs one duplicate write.
"""

import logging
from dataclasses import dataclass, replace

from .exceptions import AuthenticationFailed, InvalidInput
from .ports import CredentialHasher, CredentialStore, UserRecord
from .upstream import call_bounded

logger = logging.getLogger(__name__)


def normalize_identifier(identifier: str) -> str:
    """
    Normalize an identifier for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return identifier.strip().lower()


def is_valid_text(value: str | None) -> bool:
    """
    True for a non-empty string that can be encoded as UTF-8.

    JSON allows lone surrogates such as "\\ud800"; those cannot be
    hashed or sent to the store, so they count as invalid input.
    """
    if not value:
        return False
    try:
        value.encode()
    except UnicodeEncodeError:
        return False
    return True


def authenticate(
    store: CredentialStore,
    hasher: CredentialHasher,
    identifier: str,
    credential: str,
    timeout_seconds: float,
) -> UserRecord:
    """
    Fetch the record for a normalized identifier and compare credentials.

    The hasher runs exactly once on every path, including the
    missing-record path.

    Returns:
        The matching, non-deleted record

    Raises:
        AuthenticationFailed: If there is no usable record or the credential is wrong
        UpstreamUnavailable: If a collaborator fails or times out
    """
    record = call_bounded(timeout_seconds, store.fetch_user_by_identifier, identifier)

    if record is None or record.deleted:
        call_bounded(timeout_seconds, hasher.verify, credential, hasher.dummy_hash)
        logger.info("Authentication failed for %s", identifier)
        raise AuthenticationFailed(f"no usable account for {identifier}")

    matches = call_bounded(timeout_seconds, hasher.verify, credential, record.credential_hash)
    if not matches:
        logger.info("Authentication failed for %s", identifier)
        raise AuthenticationFailed(f"credential mismatch for {identifier}")

    return record


@dataclass
class ActivationService:
    """
    Domain service for account activation.

    Depends only on the lookup and set_active operations of the store.
    """

    store: CredentialStore
    hasher: CredentialHasher
    timeout_seconds: float = 5.0

    def activate(self, identifier: str, credential: str) -> UserRecord:
        """
        Verify the credential and mark the account active.

        Re-activating an active account succeeds without writing.

        Args:
            identifier: Username (will be normalized)
            credential: Plaintext PIN, never logged

        Returns:
            The account as it stands after activation; the app reads
            role and require_credential_change from it

        Raises:
            InvalidInput: If identifier or credential is empty or not valid text
            AuthenticationFailed: If the account is unknown or the credential is wrong
            UpstreamUnavailable: If a collaborator fails or times out
        """
        normalized = normalize_identifier(identifier or "")
        if not is_valid_text(normalized) or not is_valid_text(credential):
            raise InvalidInput("identifier and credential are required")

        record = authenticate(
            self.store, self.hasher, normalized, credential, self.timeout_seconds
        )

        if record.active:
            logger.info("Activation repeated for already active account %s", normalized)
            return record

        call_bounded(self.timeout_seconds, self.store.set_active, normalized)
        logger.info("Account %s activated", normalized)
        return replace(record, active=True)
