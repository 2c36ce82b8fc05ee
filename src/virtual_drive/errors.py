"""Error codes and exception hierarchy for the virtual drive.

Engine operations report expected failures (missing item, name collision,
bad name) through ``OperationResult`` carrying an ``ErrorCode``. Storage
failures and contract violations are raised as ``FileSystemError``
subclasses and propagate to the caller untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Stable, machine-readable error codes."""

    INVALID_NAME = "invalid_name"
    INVALID_PATH = "invalid_path"
    INVALID_ITEM_ID = "invalid_item_id"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    DUPLICATE_NAME = "duplicate_name"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    STORAGE_ERROR = "storage_error"


@dataclass(frozen=True)
class ErrorInfo:
    """How a code surfaces to HTTP callers.

    Attributes:
        code: ErrorCode enum value
        http_status: Status the HTTP surface responds with
        retryable: Whether repeating the same request can succeed
    """
    code: ErrorCode
    http_status: int
    retryable: bool

    def to_dict(self) -> dict:
        return {
            "error_code": self.code.value,
            "http_status": self.http_status,
            "retryable": self.retryable,
        }


_ERROR_TABLE: dict[ErrorCode, ErrorInfo] = {
    ErrorCode.INVALID_NAME: ErrorInfo(ErrorCode.INVALID_NAME, 422, False),
    ErrorCode.INVALID_PATH: ErrorInfo(ErrorCode.INVALID_PATH, 422, False),
    ErrorCode.INVALID_ITEM_ID: ErrorInfo(ErrorCode.INVALID_ITEM_ID, 422, False),
    # Retryable after re-reading the tree.
    ErrorCode.NOT_FOUND: ErrorInfo(ErrorCode.NOT_FOUND, 404, True),
    ErrorCode.ALREADY_EXISTS: ErrorInfo(ErrorCode.ALREADY_EXISTS, 409, False),
    ErrorCode.DUPLICATE_NAME: ErrorInfo(ErrorCode.DUPLICATE_NAME, 409, False),
    ErrorCode.STORAGE_UNAVAILABLE: ErrorInfo(ErrorCode.STORAGE_UNAVAILABLE, 503, True),
    ErrorCode.STORAGE_ERROR: ErrorInfo(ErrorCode.STORAGE_ERROR, 500, False),
}


def describe_error(code: ErrorCode) -> ErrorInfo:
    """Return HTTP status and retry semantics for ``code``."""
    return _ERROR_TABLE[code]


class FileSystemError(Exception):
    """Base class for raised virtual drive errors."""

    code: ErrorCode = ErrorCode.STORAGE_ERROR

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return describe_error(self.code).retryable


class InvalidNameError(FileSystemError):
    """A file or folder name failed validation."""

    code = ErrorCode.INVALID_NAME


class InvalidPathError(FileSystemError):
    """A path failed validation or names an impossible target."""

    code = ErrorCode.INVALID_PATH


class InvalidItemIdError(FileSystemError):
    code = ErrorCode.INVALID_ITEM_ID


class NotFoundError(FileSystemError):
    code = ErrorCode.NOT_FOUND


class AlreadyExistsError(FileSystemError):
    code = ErrorCode.ALREADY_EXISTS


class DuplicateNameError(FileSystemError):
    """Two items in one listing share a name (rejected by storage)."""

    code = ErrorCode.DUPLICATE_NAME

    def __init__(self, name: str, path: str) -> None:
        self.name = name
        super().__init__(
            f'Duplicate file/folder name "{name}" in path "{path}"',
            path=path,
        )


class StorageUnavailableError(FileSystemError):
    """Transient backend failure. Callers may retry with backoff."""

    code = ErrorCode.STORAGE_UNAVAILABLE


class StorageContractError(FileSystemError):
    """A storage call received arguments outside its contract."""

    code = ErrorCode.STORAGE_ERROR


_EXCEPTION_FOR_CODE: dict[ErrorCode, type[FileSystemError]] = {
    ErrorCode.INVALID_NAME: InvalidNameError,
    ErrorCode.INVALID_PATH: InvalidPathError,
    ErrorCode.INVALID_ITEM_ID: InvalidItemIdError,
    ErrorCode.NOT_FOUND: NotFoundError,
    ErrorCode.ALREADY_EXISTS: AlreadyExistsError,
    ErrorCode.STORAGE_UNAVAILABLE: StorageUnavailableError,
}


def error_for(code: ErrorCode | None, message: str, *, path: str | None = None) -> FileSystemError:
    """Build the exception matching a failed ``OperationResult`` code.

    Codes without a dedicated class (or no code at all) map to a plain
    ``FileSystemError``, which surfaces as ``storage_error``.
    """
    exc_type = _EXCEPTION_FOR_CODE.get(code, FileSystemError)
    return exc_type(message, path=path)
