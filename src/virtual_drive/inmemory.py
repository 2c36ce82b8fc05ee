"""In-memory FileStorage implementation for local development and tests.

Listings live in a plain dict keyed by parent path (no persistence across
restarts). Values are deep-copied on the way in and out so callers can
never mutate storage state through a returned reference.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping, Sequence

from .errors import DuplicateNameError, StorageContractError
from .models import FileItem
from .observability.logging import get_logger

logger = get_logger(__name__)


def _folder(item_id: str, name: str, modified: str, path: str) -> FileItem:
    return FileItem(id=item_id, name=name, type="folder", modified=modified, icon="📁", path=path)


def _file(item_id: str, name: str, size: int, modified: str, icon: str, path: str) -> FileItem:
    return FileItem(id=item_id, name=name, type="file", size=size, modified=modified, icon=icon, path=path)


# Seed tree used by ``use_sample_data=True``.
SAMPLE_DATA: dict[str, list[FileItem]] = {
    "": [
        _folder("1", "Common Files", "2024-01-15", "Common Files"),
        _folder("2", "Internet Explorer", "2024-01-14", "Internet Explorer"),
        _folder("3", "Windows NT", "2024-01-13", "Windows NT"),
        _folder("4", "Microsoft Office", "2024-01-12", "Microsoft Office"),
        _folder("5", "Adobe", "2024-01-11", "Adobe"),
        _file("6", "desktop.ini", 2355, "2024-01-10", "⚙️", "desktop.ini"),
        _file("7", "Thumbs.db", 1126, "2024-01-09", "🖼️", "Thumbs.db"),
    ],
    "Common Files": [
        _folder("cf1", "Microsoft Shared", "2024-01-15", "Common Files/Microsoft Shared"),
        _folder("cf2", "SpeechEngines", "2024-01-14", "Common Files/SpeechEngines"),
        _folder("cf3", "System", "2024-01-13", "Common Files/System"),
    ],
    "Common Files/Microsoft Shared": [],
    "Common Files/SpeechEngines": [],
    "Common Files/System": [],
    "Internet Explorer": [],
    "Windows NT": [],
    "Microsoft Office": [
        _folder("mo1", "Office16", "2024-01-15", "Microsoft Office/Office16"),
        _folder("mo2", "Updates", "2024-01-14", "Microsoft Office/Updates"),
        _file("mo3", "setup.exe", 15990784, "2024-01-13", "⚙️", "Microsoft Office/setup.exe"),
    ],
    "Microsoft Office/Office16": [],
    "Microsoft Office/Updates": [],
    "Adobe": [
        _folder("ad1", "Adobe Creative Cloud", "2024-01-15", "Adobe/Adobe Creative Cloud"),
        _folder("ad2", "Adobe Photoshop", "2024-01-14", "Adobe/Adobe Photoshop"),
        _folder("ad3", "Adobe Illustrator", "2024-01-13", "Adobe/Adobe Illustrator"),
    ],
    "Adobe/Adobe Creative Cloud": [],
    "Adobe/Adobe Photoshop": [],
    "Adobe/Adobe Illustrator": [],
}


def check_unique_names(path: str, items: Sequence[FileItem]) -> None:
    """Raise DuplicateNameError if two items in ``items`` share a name."""
    seen: set[str] = set()
    for item in items:
        if item.name in seen:
            raise DuplicateNameError(item.name, path)
        seen.add(item.name)


class InMemoryFileStorage:
    def __init__(
        self,
        initial_data: Mapping[str, Sequence[FileItem]] | None = None,
        *,
        use_sample_data: bool = False,
    ) -> None:
        self._listings: dict[str, list[FileItem]] = {}
        if initial_data is not None:
            self._listings = {
                path: copy.deepcopy(list(items)) for path, items in initial_data.items()
            }
        elif use_sample_data:
            self.reset_to_sample_data()

    async def list_children(self, path: str) -> list[FileItem]:
        return copy.deepcopy(self._listings.get(path, []))

    async def replace_children(self, path: str, items: Sequence[FileItem]) -> None:
        if not isinstance(items, (list, tuple)):
            raise StorageContractError(
                f"replace_children expects a list, got: {type(items).__name__}",
                path=path,
            )
        check_unique_names(path, items)
        self._listings[path] = copy.deepcopy(list(items))

    async def remove_item(self, path: str, item_id: str) -> bool:
        items = self._listings.get(path)
        if not items:
            return False
        for i, item in enumerate(items):
            if item.id == item_id:
                items.pop(i)
                logger.info("storage_item_removed", path=path, item_id=item_id)
                return True
        return False

    # ── Development helpers ─────────────────────────────────────────

    def all_paths(self) -> list[str]:
        return list(self._listings.keys())

    def total_items(self) -> int:
        return sum(len(items) for items in self._listings.values())

    def clear(self) -> None:
        self._listings = {}
        logger.info("storage_cleared")

    def reset_to_sample_data(self) -> None:
        self._listings = copy.deepcopy(SAMPLE_DATA)
        logger.info("storage_reset_to_sample_data")

    def find_by_id(self, item_id: str) -> FileItem | None:
        """Find an item anywhere in the tree."""
        for items in self._listings.values():
            for item in items:
                if item.id == item_id:
                    return copy.deepcopy(item)
        return None

    def stats(self) -> dict[str, Any]:
        paths = self.all_paths()
        return {
            "total_paths": len(paths),
            "total_items": self.total_items(),
            "paths": paths,
        }
