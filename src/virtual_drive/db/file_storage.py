"""Supabase-backed FileStorage implementation.

Implements the FileStorage protocol on top of SupabaseClient, persisting
listings in the ``file_system_items`` table. Rows are keyed by
``(tenant_id, parent_path, id)`` and every query is scoped by the tenant
configured at construction time, so two tenants never see each other's
tree.

Expected table shape::

    file_system_items(
        tenant_id text, parent_path text, id text,
        name text, type text, path text, modified text, icon text,
        size bigint null, content text null, position int, updated_at timestamptz,
        primary key (tenant_id, parent_path, id)
    )

plus the ``bulk_update_paths`` and ``recursive_delete`` RPC functions used
by the server-side shortcuts.
"""

from __future__ import annotations

from typing import Any, Awaitable, Sequence, TypeVar

import httpx

from ..errors import (
    DuplicateNameError,
    StorageContractError,
    StorageUnavailableError,
)
from ..inmemory import check_unique_names
from ..models import FileItem
from ..observability.logging import get_logger
from ..utils import utc_now_iso
from .errors import SupabaseConflictError, SupabaseError
from .supabase_client import SupabaseClient

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_TENANT_ID = "default"


class SupabaseFileStorage:
    """FileStorage backed by ``file_system_items`` via PostgREST."""

    TABLE = "file_system_items"
    CONFLICT_COLUMNS = "tenant_id,parent_path,id"

    def __init__(self, client: SupabaseClient, *, tenant_id: str | None = None) -> None:
        self._client = client
        self._tenant_id = tenant_id or DEFAULT_TENANT_ID

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    async def _call(self, operation: str, path: str, awaitable: Awaitable[T]) -> T:
        """Run one PostgREST call, translating transport-level failures."""
        try:
            return await awaitable
        except httpx.TransportError as exc:
            logger.warning(
                "storage_unavailable",
                operation=operation,
                path=path,
                tenant_id=self._tenant_id,
                error=str(exc),
            )
            raise StorageUnavailableError(
                f"Storage backend unreachable during {operation}", path=path
            ) from exc
        except SupabaseError as exc:
            if exc.is_transient:
                logger.warning(
                    "storage_unavailable",
                    operation=operation,
                    path=path,
                    tenant_id=self._tenant_id,
                    status_code=exc.status_code,
                )
                raise StorageUnavailableError(
                    f"Storage backend failed during {operation}: {exc.message}",
                    path=path,
                ) from exc
            logger.error(
                "storage_error",
                operation=operation,
                path=path,
                tenant_id=self._tenant_id,
                status_code=exc.status_code,
                code=exc.code,
            )
            raise

    def _scope(self, path: str) -> dict[str, tuple[str, Any]]:
        return {
            "tenant_id": ("eq", self._tenant_id),
            "parent_path": ("eq", path),
        }

    def _to_row(self, path: str, position: int, item: FileItem, now: str) -> dict[str, Any]:
        return {
            **item.to_dict(),
            # PostgREST bulk inserts need identical keys on every row.
            "size": item.size,
            "content": item.content,
            "tenant_id": self._tenant_id,
            "parent_path": path,
            "position": position,
            "updated_at": now,
        }

    # ── FileStorage protocol ────────────────────────────────────────

    async def list_children(
        self,
        path: str,
        *,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[FileItem]:
        rows = await self._call(
            "list_children",
            path,
            self._client.select(
                self.TABLE,
                filters=self._scope(path),
                order="position.asc",
                limit=limit,
                offset=offset,
            ),
        )
        return [FileItem.from_dict(row) for row in rows]

    async def replace_children(self, path: str, items: Sequence[FileItem]) -> None:
        if not isinstance(items, (list, tuple)):
            raise StorageContractError(
                f"replace_children expects a list, got: {type(items).__name__}",
                path=path,
            )
        check_unique_names(path, items)

        # Drop rows that are no longer part of the listing, then upsert the rest.
        stale_filter = self._scope(path)
        if items:
            stale_filter["id"] = ("not.in", [item.id for item in items])
        await self._call(
            "replace_children",
            path,
            self._client.delete(self.TABLE, filters=stale_filter),
        )
        if not items:
            return

        now = utc_now_iso()
        rows = [self._to_row(path, i, item, now) for i, item in enumerate(items)]
        try:
            await self._call(
                "replace_children",
                path,
                self._client.insert(
                    self.TABLE,
                    rows,
                    upsert=True,
                    on_conflict=self.CONFLICT_COLUMNS,
                ),
            )
        except SupabaseError as exc:
            # A unique (tenant_id, parent_path, name) index exists server-side.
            if not (isinstance(exc, SupabaseConflictError) or exc.is_unique_violation):
                raise
            raise DuplicateNameError(exc.details or exc.message, path) from exc

    async def remove_item(self, path: str, item_id: str) -> bool:
        filters = self._scope(path)
        filters["id"] = ("eq", item_id)
        deleted = await self._call(
            "remove_item",
            path,
            self._client.delete(self.TABLE, filters=filters),
        )
        if deleted:
            logger.info("storage_item_removed", path=path, item_id=item_id, tenant_id=self._tenant_id)
        return bool(deleted)

    # ── Server-side shortcuts ───────────────────────────────────────

    async def bulk_update_paths(self, old_path: str, new_path: str) -> int:
        """Rewrite ``path``/``parent_path`` prefixes below ``old_path`` in one call."""
        result = await self._call(
            "bulk_update_paths",
            old_path,
            self._client.rpc(
                "bulk_update_paths",
                {
                    "p_old_path": old_path,
                    "p_new_path": new_path,
                    "p_tenant_id": self._tenant_id,
                },
            ),
        )
        return int(result or 0)

    async def recursive_delete(self, path: str) -> int:
        """Delete every row at or below ``path`` in one server transaction."""
        result = await self._call(
            "recursive_delete",
            path,
            self._client.rpc(
                "recursive_delete",
                {"p_path": path, "p_tenant_id": self._tenant_id},
            ),
        )
        return int(result or 0)

    # ── Inspection ──────────────────────────────────────────────────

    async def list_all(self, *, limit: int | None = None, offset: int | None = None) -> list[FileItem]:
        rows = await self._call(
            "list_all",
            "",
            self._client.select(
                self.TABLE,
                filters={"tenant_id": ("eq", self._tenant_id)},
                order="parent_path.asc,position.asc",
                limit=limit,
                offset=offset,
            ),
        )
        return [FileItem.from_dict(row) for row in rows]

    async def stats(self) -> dict[str, Any]:
        rows = await self._call(
            "stats",
            "",
            self._client.select(
                self.TABLE,
                filters={"tenant_id": ("eq", self._tenant_id)},
                columns="parent_path",
            ),
        )
        return {
            "total_items": len(rows),
            "total_paths": len({row.get("parent_path") for row in rows}),
            "tenant_id": self._tenant_id,
        }

    async def test_connection(self) -> bool:
        try:
            await self._client.select(self.TABLE, columns="id", limit=1)
        except (httpx.HTTPError, SupabaseError):
            logger.warning("storage_connection_test_failed", tenant_id=self._tenant_id, exc_info=True)
            return False
        return True
