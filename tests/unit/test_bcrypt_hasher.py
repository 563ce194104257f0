"""
Unit tests for BcryptHasher adapter.

Tests verify the hasher implements CredentialHasher protocol
and maps malformed stored hashes to UpstreamUnavailable.
"""

import bcrypt
import pytest

from src.adapters.hashing import BcryptHasher
from src.domain.exceptions import InvalidInput, UpstreamUnavailable


@pytest.fixture(scope="module")
def hasher() -> BcryptHasher:
    """Low-cost hasher to keep tests fast."""
    return BcryptHasher(cost=4)


class TestBcryptHasherProtocol:
    """Tests for CredentialHasher protocol compliance."""

    def test_implements_credential_hasher_protocol(self, hasher: BcryptHasher) -> None:
        """BcryptHasher has every CredentialHasher member."""
        assert isinstance(hasher.dummy_hash, str)
        assert callable(hasher.hash)
        assert callable(hasher.verify)

    def test_no_explicit_inheritance(self) -> None:
        """BcryptHasher uses structural subtyping, not inheritance."""
        assert BcryptHasher.__bases__ == (object,)


class TestHashing:
    """Tests for hash and verify."""

    def test_hash_is_bcrypt_not_plaintext(self, hasher: BcryptHasher) -> None:
        """Hash uses bcrypt and never equals the plaintext."""
        credential_hash = hasher.hash("1234")

        assert credential_hash != "1234"
        assert credential_hash.startswith("$2")

    def test_hash_uses_configured_cost(self) -> None:
        """Work factor is embedded in the hash."""
        assert BcryptHasher(cost=5).hash("1234").startswith("$2b$05$")

    def test_hash_is_salted(self, hasher: BcryptHasher) -> None:
        """Hashing the same PIN twice gives different hashes."""
        assert hasher.hash("1234") != hasher.hash("1234")

    def test_verify_correct_credential(self, hasher: BcryptHasher) -> None:
        """Correct PIN verifies."""
        assert hasher.verify("1234", hasher.hash("1234")) is True

    def test_verify_wrong_credential(self, hasher: BcryptHasher) -> None:
        """Wrong PIN does not verify."""
        assert hasher.verify("9999", hasher.hash("1234")) is False

    def test_verify_accepts_externally_created_hash(self, hasher: BcryptHasher) -> None:
        """Hashes produced by bcrypt directly (e.g. seeded rows) verify."""
        seeded = bcrypt.hashpw(b"2468", bcrypt.gensalt(4)).decode()

        assert hasher.verify("2468", seeded) is True

    def test_dummy_hash_is_valid_bcrypt(self, hasher: BcryptHasher) -> None:
        """Dummy hash can be compared against without errors."""
        assert hasher.verify("1234", hasher.dummy_hash) is False

    def test_long_credential_does_not_raise(self, hasher: BcryptHasher) -> None:
        """Credentials beyond bcrypt's 72-byte limit still hash and verify."""
        long_credential = "7" * 100

        assert hasher.verify(long_credential, hasher.hash(long_credential)) is True

    @pytest.mark.parametrize("malformed", ["", "not-a-hash", "1234"])
    def test_malformed_hash_raises_upstream_unavailable(
        self, hasher: BcryptHasher, malformed: str
    ) -> None:
        """A stored value that is not a bcrypt hash raises UpstreamUnavailable."""
        with pytest.raises(UpstreamUnavailable):
            hasher.verify("1234", malformed)

    def test_unencodable_credential_raises_invalid_input(
        self, hasher: BcryptHasher, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A lone surrogate is bad input, not a malformed stored hash."""
        stored = hasher.hash("1234")

        with caplog.at_level("ERROR"), pytest.raises(InvalidInput):
            hasher.verify("\ud800", stored)

        assert "malformed" not in caplog.text

    def test_hash_unencodable_credential_raises_invalid_input(self, hasher: BcryptHasher) -> None:
        """Hashing a lone surrogate raises InvalidInput."""
        with pytest.raises(InvalidInput):
            hasher.hash("\udfff")
