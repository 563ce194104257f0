"""Repository adapters - Credential store implementations."""

from .postgres import PostgresCredentialStore, run_migrations
from .supabase import SupabaseCredentialStore, create_supabase_client

__all__ = [
    "PostgresCredentialStore",
    "SupabaseCredentialStore",
    "create_supabase_client",
    "run_migrations",
]
