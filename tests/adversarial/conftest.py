"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition and timing tests.
"""

import pytest

from src.adapters.hashing import BcryptHasher

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture(scope="module")
def production_hasher() -> BcryptHasher:
    """Hasher at the default work factor, so bcrypt dominates timings."""
    return BcryptHasher(cost=10)
