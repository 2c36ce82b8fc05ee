"""Virtual drive: a hierarchical file/folder tree over pluggable storage."""

from .errors import (
    AlreadyExistsError,
    DuplicateNameError,
    ErrorCode,
    FileSystemError,
    InvalidItemIdError,
    InvalidNameError,
    InvalidPathError,
    NotFoundError,
    StorageContractError,
    StorageUnavailableError,
)
from .inmemory import InMemoryFileStorage
from .models import FileItem, OperationResult
from .operations import FileOperations
from .protocols import BulkFileStorage, FileStorage
from .settings import DriveSettings, SettingsError, build_storage

__version__ = "0.1.0"

__all__ = [
    "AlreadyExistsError",
    "BulkFileStorage",
    "DriveSettings",
    "DuplicateNameError",
    "ErrorCode",
    "FileItem",
    "FileOperations",
    "FileStorage",
    "FileSystemError",
    "InMemoryFileStorage",
    "InvalidItemIdError",
    "InvalidNameError",
    "InvalidPathError",
    "NotFoundError",
    "OperationResult",
    "SettingsError",
    "StorageContractError",
    "StorageUnavailableError",
    "build_storage",
]
