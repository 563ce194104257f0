"""
bcrypt hasher adapter - Implements CredentialHasher protocol.

Security Design - Timing Oracle Prevention:
------------------------------------------
1. **bcrypt.checkpw()**: Used for every PIN comparison. bcrypt's built-in
   comparison is constant-time and its cost dominates response time.

2. **dummy_hash**: Computed once per hasher at the configured cost. The
   domain compares against it when no account exists, so a missing
   account costs the same bcrypt work as a wrong PIN.
"""

import logging

import bcrypt

from src.domain.exceptions import InvalidInput, UpstreamUnavailable

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes; newer releases reject longer input.
_MAX_CREDENTIAL_BYTES = 72


def _encode(credential: str) -> bytes:
    try:
        return credential.encode()[:_MAX_CREDENTIAL_BYTES]
    except UnicodeEncodeError:
        raise InvalidInput("credential is not valid text") from None


class BcryptHasher:
    """
    Implements CredentialHasher protocol via bcrypt.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, cost: int = 10) -> None:
        """
        Initialize hasher with a work factor.

        Args:
            cost: bcrypt rounds (log2 iterations)
        """
        self._cost = cost
        self._dummy_hash = bcrypt.hashpw(
            b"dummy_pin_for_timing_safety", bcrypt.gensalt(rounds=cost)
        ).decode()

    @property
    def dummy_hash(self) -> str:
        return self._dummy_hash

    def hash(self, credential: str) -> str:
        """Hash a plaintext credential with a fresh salt."""
        return bcrypt.hashpw(_encode(credential), bcrypt.gensalt(rounds=self._cost)).decode()

    def verify(self, credential: str, credential_hash: str) -> bool:
        """
        Compare a plaintext credential with a stored bcrypt hash.

        Raises:
            InvalidInput: If the credential cannot be encoded
            UpstreamUnavailable: If the stored hash is not a valid bcrypt hash
        """
        encoded = _encode(credential)
        try:
            return bcrypt.checkpw(encoded, credential_hash.encode())
        except ValueError as e:
            logger.error("Stored credential hash is malformed: %s", e)
            raise UpstreamUnavailable("stored credential hash is malformed") from e
