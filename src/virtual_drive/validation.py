"""Name, path and id validation.

These checks run at the HTTP boundary before a request reaches the
engine. The engine re-checks names on create/rename but trusts paths.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import ErrorCode, InvalidItemIdError, InvalidNameError, InvalidPathError

MAX_NAME_LENGTH = 255
MAX_PATH_LENGTH = 4096
MAX_ID_LENGTH = 128

RESERVED_NAMES: frozenset[str] = frozenset({
    "CON", "PRN", "AUX", "NUL",
    *(f"COM{i}" for i in range(1, 10)),
    *(f"LPT{i}" for i in range(1, 10)),
})

INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
INVALID_PATH_CHARS = re.compile(r"[\x00-\x1f]")
UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    message: str | None = None
    code: ErrorCode | None = None

    def __bool__(self) -> bool:
        return self.valid


_OK = ValidationResult(valid=True)


def _name_error(message: str) -> ValidationResult:
    return ValidationResult(False, message, ErrorCode.INVALID_NAME)


def _path_error(message: str) -> ValidationResult:
    return ValidationResult(False, message, ErrorCode.INVALID_PATH)


def _id_error(message: str) -> ValidationResult:
    return ValidationResult(False, message, ErrorCode.INVALID_ITEM_ID)


def validate_name(name: str) -> ValidationResult:
    """Validate a file or folder name."""
    if not isinstance(name, str) or not name.strip():
        return _name_error("Name cannot be empty")
    if name != name.strip():
        return _name_error("Name cannot start or end with spaces")
    if name in (".", ".."):
        return _name_error("Name cannot be '.' or '..'")
    if len(name) > MAX_NAME_LENGTH:
        return _name_error(f"Name is too long (max {MAX_NAME_LENGTH} characters)")
    if INVALID_NAME_CHARS.search(name):
        return _name_error("Name contains invalid characters")
    # Reserved device names stay reserved with any extension ("con.txt").
    if name.upper().split(".")[0] in RESERVED_NAMES:
        return _name_error("Name is reserved by the system")
    return _OK


def validate_path(path: str) -> ValidationResult:
    """Validate a non-root directory path."""
    if not isinstance(path, str) or not path.strip():
        return _path_error("Path cannot be empty")
    if ".." in path:
        return _path_error("Path cannot contain '..'")
    if len(path) > MAX_PATH_LENGTH:
        return _path_error(f"Path is too long (max {MAX_PATH_LENGTH} characters)")
    if INVALID_PATH_CHARS.search(path):
        return _path_error("Path contains invalid characters")
    return _OK


def validate_item_id(item_id: str, *, require_uuid: bool = True) -> ValidationResult:
    """Validate an item id; ``require_uuid=False`` accepts any short token."""
    if not isinstance(item_id, str) or not item_id.strip():
        return _id_error("ID cannot be empty")
    if len(item_id) > MAX_ID_LENGTH:
        return _id_error(f"ID is too long (max {MAX_ID_LENGTH} characters)")
    if INVALID_PATH_CHARS.search(item_id):
        return _id_error("ID contains invalid characters")
    if require_uuid and not UUID_RE.match(item_id):
        return _id_error("ID is not a valid UUID")
    return _OK


def ensure_valid_name(name: str) -> str:
    """Return ``name`` or raise InvalidNameError."""
    result = validate_name(name)
    if not result.valid:
        raise InvalidNameError(result.message or "Invalid name")
    return name


def ensure_valid_path(path: str) -> str:
    """Return ``path`` or raise InvalidPathError. The root is always valid."""
    if path == "":
        return path
    result = validate_path(path)
    if not result.valid:
        raise InvalidPathError(result.message or "Invalid path", path=path)
    return path


def ensure_valid_item_id(item_id: str, *, require_uuid: bool = False) -> str:
    """Return ``item_id`` or raise InvalidItemIdError.

    UUIDs are not required by default: seeded trees use short ids.
    """
    result = validate_item_id(item_id, require_uuid=require_uuid)
    if not result.valid:
        raise InvalidItemIdError(result.message or "Invalid item id")
    return item_id
