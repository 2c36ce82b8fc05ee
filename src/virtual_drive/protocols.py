"""Storage protocol interfaces for dependency injection.

These protocols define the contracts that concrete storage backends
(InMemory for local dev and tests, Supabase for durable multi-tenant
deployments) must satisfy. ``FileOperations`` accepts any implementation
that matches ``FileStorage``.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from .models import FileItem


@runtime_checkable
class FileStorage(Protocol):
    """Path-keyed listings of direct children.

    ``list_children`` never fails for an unknown path (it returns ``[]``).
    ``replace_children`` raises DuplicateNameError when two items share a
    name. Any call may raise StorageUnavailableError.
    """

    async def list_children(self, path: str) -> list[FileItem]: ...
    async def replace_children(self, path: str, items: Sequence[FileItem]) -> None: ...
    async def remove_item(self, path: str, item_id: str) -> bool: ...


@runtime_checkable
class BulkFileStorage(FileStorage, Protocol):
    """Server-side shortcuts offered by durable backends."""

    async def bulk_update_paths(self, old_path: str, new_path: str) -> int: ...
    async def recursive_delete(self, path: str) -> int: ...
