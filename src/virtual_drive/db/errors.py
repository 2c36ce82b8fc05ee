"""PostgREST failure types raised by ``SupabaseClient``.

Built from the response body only, so neither httpx objects nor the
service-role key travel upward with them. ``SupabaseFileStorage`` turns
them into ``FileSystemError`` subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass

# Postgres SQLSTATE for unique_violation.
UNIQUE_VIOLATION = "23505"


@dataclass(frozen=True, slots=True)
class SupabaseError(Exception):
    """A non-2xx PostgREST response."""

    status_code: int
    message: str
    code: str | None = None
    details: str | None = None
    hint: str | None = None

    def __str__(self) -> str:
        text = f"PostgREST {self.status_code}: {self.message}"
        if self.code:
            text += f" [{self.code}]"
        if self.details:
            text += f" ({self.details})"
        return text

    @property
    def is_transient(self) -> bool:
        """5xx, 408 and 429 responses may succeed on retry."""
        return self.status_code >= 500 or self.status_code in (408, 429)

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION


class SupabaseAuthError(SupabaseError):
    """401/403: wrong key or a row-level-security denial."""


class SupabaseNotFoundError(SupabaseError):
    """404: the table or RPC function does not exist."""


class SupabaseConflictError(SupabaseError):
    """409: a unique or foreign-key constraint rejected the write."""
