"""Data model for the virtual drive.

  - ``FileItem`` is one file or folder record inside a listing.
  - ``OperationResult`` is what every engine operation returns.

A listing is simply ``list[FileItem]`` stored under its parent path.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal, Mapping

from .errors import ErrorCode

ItemType = Literal["file", "folder"]

FILE: ItemType = "file"
FOLDER: ItemType = "folder"

FOLDER_ICON = "📁"
FILE_ICON = "📄"


@dataclass(slots=True)
class FileItem:
    """A file or folder.

    Attributes:
        id: Opaque unique identifier, assigned once at creation.
        name: Display name, unique among siblings.
        type: ``"file"`` or ``"folder"``.
        path: Root-relative path, always ``join(parent_path, name)``.
        modified: Last mutation date (``YYYY-MM-DD``).
        icon: Presentation hint.
        size: Byte count for files, ``None`` for folders.
        content: Optional inline file content.
    """

    id: str
    name: str
    type: ItemType
    path: str
    modified: str
    icon: str = ""
    size: int | None = None
    content: str | None = None

    @property
    def is_folder(self) -> bool:
        return self.type == FOLDER

    @property
    def is_file(self) -> bool:
        return self.type == FILE

    def copy(self, **changes: Any) -> FileItem:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "path": self.path,
            "modified": self.modified,
            "icon": self.icon,
        }
        if self.type == FILE:
            data["size"] = self.size if self.size is not None else 0
            if self.content is not None:
                data["content"] = self.content
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FileItem:
        """Build an item from a storage row; unknown columns are ignored."""
        item_type = data.get("type", FILE)
        if item_type not in (FILE, FOLDER):
            raise ValueError(f"Unknown item type: {item_type!r}")
        size = data.get("size")
        if item_type == FILE:
            size = int(size) if size is not None else 0
        else:
            size = None
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            type=item_type,
            path=str(data.get("path") or ""),
            modified=str(data.get("modified") or ""),
            icon=str(data.get("icon") or ""),
            size=size,
            content=data.get("content") if item_type == FILE else None,
        )


def is_file(item: FileItem) -> bool:
    return item.type == FILE


def is_folder(item: FileItem) -> bool:
    return item.type == FOLDER


@dataclass
class OperationResult:
    """Discriminated success/failure record returned by the engine."""

    success: bool
    data: FileItem | list[FileItem] | None = None
    error: str | None = None
    code: ErrorCode | None = None

    @classmethod
    def ok(cls, data: FileItem | list[FileItem] | None = None) -> OperationResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: ErrorCode, error: str) -> OperationResult:
        return cls(success=False, error=error, code=code)

    @property
    def item(self) -> FileItem:
        """The single item payload. Raises if the result carries none."""
        if not isinstance(self.data, FileItem):
            raise TypeError("OperationResult does not carry a single item")
        return self.data

    @property
    def items(self) -> list[FileItem]:
        if not isinstance(self.data, list):
            raise TypeError("OperationResult does not carry a listing")
        return self.data

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if isinstance(self.data, FileItem):
            out["data"] = self.data.to_dict()
        elif isinstance(self.data, list):
            out["data"] = [item.to_dict() for item in self.data]
        if self.error is not None:
            out["error"] = self.error
        if self.code is not None:
            out["code"] = self.code.value
        return out
