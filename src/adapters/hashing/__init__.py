"""Hashing adapters - Credential hashing implementations."""

from .bcrypt_hasher import BcryptHasher

__all__ = ["BcryptHasher"]
