"""File operation routes for the virtual drive API.

Malformed input raises the matching ``FileSystemError`` and failed engine
results are raised the same way; the app's exception handler renders both.
"""
from typing import Any, Optional, get_args

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from .. import paths
from ..errors import error_for
from ..models import OperationResult
from ..operations import FileOperations
from ..utils import format_size
from ..validation import ensure_valid_item_id, ensure_valid_name, ensure_valid_path
from .schemas import DeleteRequest, FileAction, FileActionRequest

ACTIONS: tuple[str, ...] = get_args(FileAction)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _respond(result: OperationResult) -> JSONResponse:
    if not result.success:
        raise error_for(result.code, result.error or "Operation failed")
    return JSONResponse(status_code=200, content=result.to_dict())


def _clean_path(raw: Optional[str]) -> str:
    """Normalize a client path into a storage key (no leading/trailing slash)."""
    return ensure_valid_path(paths.normalize(raw).strip(paths.SEPARATOR))


def _with_size_display(entry: dict[str, Any]) -> dict[str, Any]:
    if entry.get("type") == "file":
        entry["size_display"] = format_size(entry.get("size"))
    return entry


def create_file_router(operations: FileOperations) -> APIRouter:
    """Create the ``/api/files`` router.

    Args:
        operations: Engine every route delegates to

    Returns:
        Configured APIRouter with list, action and delete endpoints
    """
    router = APIRouter(prefix="/api", tags=["files"])

    @router.get("/files")
    async def list_files(path: Optional[str] = Query(default="")):
        """List one directory."""
        clean = _clean_path(path)
        result = await operations.get_file_tree(clean)
        files = [_with_size_display(item.to_dict()) for item in result.items]
        return {"success": True, "data": {"files": files, "path": clean}}

    @router.get("/files/search")
    async def search_files(q: str, path: Optional[str] = Query(default="")):
        """Find items below ``path`` whose name matches the glob ``q``."""
        clean = _clean_path(path)
        if not q.strip():
            return _error(400, "Search pattern is required")

        result = await operations.find_by_name(q, clean)
        files = [_with_size_display(item.to_dict()) for item in result.items]
        return {"success": True, "data": {"files": files, "pattern": q, "path": clean}}

    @router.post("/files")
    async def file_action(body: FileActionRequest, path: Optional[str] = Query(default="")):
        """Dispatch createFolder, createFile, rename, copy or move."""
        clean = _clean_path(path)

        action = body.action
        if action not in ACTIONS:
            return _error(400, f"Unknown action: {action}")

        if action in ("createFolder", "createFile", "rename"):
            if body.name is None:
                return _error(400, "Missing required field: name")
            ensure_valid_name(body.name)

        if action in ("rename", "copy", "move"):
            if not (body.item_id or "").strip():
                return _error(400, "Missing required field: itemId")
            ensure_valid_item_id(body.item_id)

        target = ""
        if action in ("copy", "move"):
            if body.target_path is None:
                return _error(400, "Missing required field: targetPath")
            target = _clean_path(body.target_path)

        if action == "createFolder":
            result = await operations.create_folder(clean, body.name)
        elif action == "createFile":
            result = await operations.create_file(clean, body.name, body.content, body.size)
        elif action == "rename":
            result = await operations.rename_item(clean, body.item_id, body.name)
        elif action == "copy":
            result = await operations.copy_item(clean, target, body.item_id)
        else:
            result = await operations.move_item(clean, target, body.item_id)
        return _respond(result)

    @router.delete("/files")
    async def delete_file(body: DeleteRequest, path: Optional[str] = Query(default="")):
        """Delete an item (recursively for folders)."""
        clean = _clean_path(path)
        if not (body.item_id or "").strip():
            return _error(400, "Missing required field: itemId")
        ensure_valid_item_id(body.item_id)

        return _respond(await operations.delete_item(clean, body.item_id))

    return router
