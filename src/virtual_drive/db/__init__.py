"""Durable storage backend (Supabase / PostgREST)."""

from .errors import (
    SupabaseAuthError,
    SupabaseConflictError,
    SupabaseError,
    SupabaseNotFoundError,
)
from .file_storage import SupabaseFileStorage
from .supabase_client import PostgrestFilter, SupabaseClient

__all__ = [
    "PostgrestFilter",
    "SupabaseAuthError",
    "SupabaseClient",
    "SupabaseConflictError",
    "SupabaseError",
    "SupabaseFileStorage",
    "SupabaseNotFoundError",
]
