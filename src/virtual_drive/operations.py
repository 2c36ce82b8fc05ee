"""File operations engine for the virtual drive.

``FileOperations`` implements create/rename/delete/copy/move/read on top of
any ``FileStorage``. The tree is never held in memory: every call reads the
listings it needs, mutates copies and writes them back.

There are no locks and no transactions. Two calls touching the same
listing can interleave their read and write phases, and the later write
wins (lost update). A failure halfway through a multi-listing operation is
not rolled back.
"""

from __future__ import annotations

import fnmatch
import functools
import time
from typing import Any, AsyncIterator, Awaitable, Callable

from . import paths
from .errors import ErrorCode, FileSystemError
from .models import FILE, FILE_ICON, FOLDER, FOLDER_ICON, FileItem, ItemType, OperationResult
from .observability.logging import get_logger
from .observability.metrics import FILE_OPERATION_DURATION_SECONDS, FILE_OPERATIONS_TOTAL
from .protocols import FileStorage
from .utils import current_date, generate_id
from .validation import MAX_NAME_LENGTH, validate_name

logger = get_logger(__name__)

MSG_ALREADY_EXISTS = "A file or folder with that name already exists."
MSG_NOT_FOUND = "Item not found."


def unique_copy_name(base_name: str, existing_names: set[str] | list[str]) -> str:
    """Pick ``"{base} (Copy)"``, then ``"{base} (Copy 1)"``, ``(Copy 2)`` ...

    Never gives up: the counter grows until a free name turns up. The base
    is cut short when needed so the result stays within ``MAX_NAME_LENGTH``.
    """
    suffix = " (Copy)"
    counter = 1
    while True:
        candidate = base_name[:MAX_NAME_LENGTH - len(suffix)] + suffix
        if candidate not in existing_names:
            return candidate
        suffix = f" (Copy {counter})"
        counter += 1


def _observed(operation: str) -> Callable[[Callable[..., Awaitable[OperationResult]]], Callable[..., Awaitable[OperationResult]]]:
    """Count, time and log one engine operation."""

    def decorator(fn: Callable[..., Awaitable[OperationResult]]) -> Callable[..., Awaitable[OperationResult]]:
        @functools.wraps(fn)
        async def wrapper(self: FileOperations, *args: Any, **kwargs: Any) -> OperationResult:
            start = time.perf_counter()
            try:
                result = await fn(self, *args, **kwargs)
            except FileSystemError as exc:
                FILE_OPERATIONS_TOTAL.labels(operation=operation, outcome=exc.code.value).inc()
                logger.warning(
                    "file_operation_error",
                    operation=operation,
                    error_code=exc.code.value,
                    error=exc.message,
                    retryable=exc.retryable,
                )
                raise
            finally:
                FILE_OPERATION_DURATION_SECONDS.labels(operation=operation).observe(
                    time.perf_counter() - start
                )

            if result.success:
                outcome = "ok"
            else:
                outcome = result.code.value if result.code else "failed"
            FILE_OPERATIONS_TOTAL.labels(operation=operation, outcome=outcome).inc()
            logger.info(
                "file_operation",
                operation=operation,
                outcome=outcome,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return result

        return wrapper

    return decorator


class FileOperations:
    """Core operations for managing the virtual file system.

    Args:
        storage: Backend holding the listings. Chosen by the caller, never
            looked up globally, so each test can hand in its own instance.
    """

    def __init__(self, storage: FileStorage) -> None:
        self.storage = storage

    # ── Create ──────────────────────────────────────────────────────

    @_observed("create_folder")
    async def create_folder(self, path: str, name: str) -> OperationResult:
        """Create an empty folder ``name`` inside ``path``."""
        return await self._create(path, name, FOLDER)

    @_observed("create_file")
    async def create_file(
        self,
        path: str,
        name: str,
        content: str = "",
        size: int = 0,
    ) -> OperationResult:
        """Create a file ``name`` inside ``path``."""
        return await self._create(path, name, FILE, content=content, size=size)

    async def _create(
        self,
        path: str,
        name: str,
        item_type: ItemType,
        *,
        content: str = "",
        size: int = 0,
    ) -> OperationResult:
        check = validate_name(name)
        if not check.valid:
            return OperationResult.fail(
                ErrorCode.INVALID_NAME,
                f"Invalid {item_type} name: {check.message}",
            )

        items = await self.storage.list_children(path)
        if any(item.name == name for item in items):
            return OperationResult.fail(ErrorCode.ALREADY_EXISTS, MSG_ALREADY_EXISTS)

        is_folder = item_type == FOLDER
        new_item = FileItem(
            id=generate_id(),
            name=name,
            type=item_type,
            path=paths.join(path, name),
            modified=current_date(),
            icon=FOLDER_ICON if is_folder else FILE_ICON,
            size=None if is_folder else size,
            content=None if is_folder or not content else content,
        )

        items.append(new_item)
        await self.storage.replace_children(path, items)
        if is_folder:
            await self.storage.replace_children(new_item.path, [])

        return OperationResult.ok(new_item.copy())

    # ── Rename ──────────────────────────────────────────────────────

    @_observed("rename")
    async def rename_item(self, path: str, item_id: str, new_name: str) -> OperationResult:
        """Rename an item in place; folders carry their whole subtree along."""
        check = validate_name(new_name)
        if not check.valid:
            return OperationResult.fail(ErrorCode.INVALID_NAME, f"Invalid name: {check.message}")

        items = await self.storage.list_children(path)
        item = next((i for i in items if i.id == item_id), None)
        if item is None:
            return OperationResult.fail(ErrorCode.NOT_FOUND, MSG_NOT_FOUND)

        if any(i.name == new_name and i.id != item_id for i in items):
            return OperationResult.fail(ErrorCode.ALREADY_EXISTS, MSG_ALREADY_EXISTS)

        old_path = item.path
        new_path = paths.join(path, new_name)

        item.name = new_name
        item.path = new_path
        item.modified = current_date()
        await self.storage.replace_children(path, items)

        if item.is_folder and old_path != new_path:
            await self._rekey_subtree(old_path, new_path)

        return OperationResult.ok(item.copy())

    async def _rekey_subtree(self, old_root: str, new_root: str) -> None:
        """Move every listing under ``old_root`` to the matching key under ``new_root``.

        Each listing is written under its new key and then the old key is
        cleared. Walks with an explicit stack so tree depth is unbounded.
        """
        stack = [old_root]
        while stack:
            old_key = stack.pop()
            new_key = paths.rewrite_prefix(old_key, old_root, new_root)
            children = await self.storage.list_children(old_key)
            for child in children:
                if child.is_folder:
                    stack.append(child.path)
                child.path = paths.rewrite_prefix(child.path, old_root, new_root)
            await self.storage.replace_children(new_key, children)
            await self.storage.replace_children(old_key, [])

    # ── Delete ──────────────────────────────────────────────────────

    @_observed("delete")
    async def delete_item(self, path: str, item_id: str) -> OperationResult:
        """Delete an item; folders are emptied depth-first before removal."""
        items = await self.storage.list_children(path)
        item = next((i for i in items if i.id == item_id), None)
        if item is None:
            return OperationResult.fail(ErrorCode.NOT_FOUND, MSG_NOT_FOUND)

        if item.is_folder:
            stack = [item.path]
            while stack:
                current = stack.pop()
                children = await self.storage.list_children(current)
                for child in children:
                    if child.is_folder:
                        stack.append(child.path)
                await self.storage.replace_children(current, [])

        removed = await self.storage.remove_item(path, item_id)
        if not removed:
            return OperationResult.fail(ErrorCode.NOT_FOUND, "Failed to delete item.")
        return OperationResult.ok()

    # ── Copy ────────────────────────────────────────────────────────

    @_observed("copy")
    async def copy_item(self, source_path: str, target_path: str, item_id: str) -> OperationResult:
        """Duplicate an item (recursively for folders) into ``target_path``.

        Name collisions resolve to ``"name (Copy)"``, ``"name (Copy 1)"`` ...
        """
        source_items = await self.storage.list_children(source_path)
        source_item = next((i for i in source_items if i.id == item_id), None)
        if source_item is None:
            return OperationResult.fail(ErrorCode.NOT_FOUND, "Source item not found.")

        if source_item.is_folder and paths.is_descendant(target_path, source_item.path):
            return OperationResult.fail(
                ErrorCode.INVALID_PATH,
                "Cannot copy a folder into itself or one of its subfolders.",
            )

        target_items = await self.storage.list_children(target_path)
        copy_name = unique_copy_name(source_item.name, {i.name for i in target_items})
        copied = source_item.copy(
            id=generate_id(),
            name=copy_name,
            path=paths.join(target_path, copy_name),
            modified=current_date(),
        )

        target_items.append(copied)
        await self.storage.replace_children(target_path, target_items)

        if source_item.is_folder:
            await self._copy_folder_contents(source_item.path, copied.path)

        return OperationResult.ok(copied.copy())

    async def _copy_folder_contents(self, source_path: str, target_path: str) -> None:
        source_children = await self.storage.list_children(source_path)
        target_children = await self.storage.list_children(target_path)

        existing_names = {child.name for child in target_children}
        copied_children: list[FileItem] = []

        for child in source_children:
            unique_name = unique_copy_name(child.name, existing_names)
            existing_names.add(unique_name)

            copied_child = child.copy(
                id=generate_id(),
                name=unique_name,
                path=paths.join(target_path, unique_name),
                modified=current_date(),
            )
            copied_children.append(copied_child)

            if child.is_folder:
                await self._copy_folder_contents(child.path, copied_child.path)

        await self.storage.replace_children(target_path, target_children + copied_children)

    # ── Move ────────────────────────────────────────────────────────

    @_observed("move")
    async def move_item(self, source_path: str, target_path: str, item_id: str) -> OperationResult:
        """Relocate an item into ``target_path``.

        Unlike copy, a name collision in the target is an error; the item is
        never renamed on the way.
        """
        source_items = await self.storage.list_children(source_path)
        index = next((i for i, item in enumerate(source_items) if item.id == item_id), -1)
        if index == -1:
            return OperationResult.fail(ErrorCode.NOT_FOUND, "Item not found in source path.")

        item = source_items[index]
        if item.is_folder and paths.is_descendant(target_path, item.path):
            return OperationResult.fail(
                ErrorCode.INVALID_PATH,
                "Cannot move a folder into itself or one of its subfolders.",
            )

        target_items = await self.storage.list_children(target_path)
        if any(i.name == item.name for i in target_items):
            return OperationResult.fail(
                ErrorCode.ALREADY_EXISTS,
                "A file or folder with that name already exists in the target folder.",
            )

        del source_items[index]
        await self.storage.replace_children(source_path, source_items)

        old_path = item.path
        item.path = paths.join(target_path, item.name)
        item.modified = current_date()

        target_items.append(item)
        await self.storage.replace_children(target_path, target_items)

        if item.is_folder:
            await self._rekey_subtree(old_path, item.path)

        return OperationResult.ok(item.copy())

    # ── Read ────────────────────────────────────────────────────────

    async def get_file_tree(self, path: str = "") -> OperationResult:
        """Return a copy of the listing at ``path`` (empty if unknown)."""
        items = await self.storage.list_children(path)
        return OperationResult.ok([item.copy() for item in items])

    async def walk(self, path: str = "") -> AsyncIterator[FileItem]:
        """Yield every item below ``path``, parents before their children."""
        stack = [path]
        while stack:
            current = stack.pop()
            children = await self.storage.list_children(current)
            for child in children:
                yield child.copy()
            for child in reversed(children):
                if child.is_folder:
                    stack.append(child.path)

    @_observed("search")
    async def find_by_name(self, pattern: str, path: str = "") -> OperationResult:
        """Case-insensitive glob search over item names below ``path``."""
        needle = pattern.lower()
        matches = [
            item async for item in self.walk(path)
            if fnmatch.fnmatch(item.name.lower(), needle)
        ]
        return OperationResult.ok(matches)
