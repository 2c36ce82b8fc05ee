"""Pytest configuration for virtual_drive tests."""
import sys
from pathlib import Path

# Add src/ to path for src-layout imports
_PROJECT_ROOT = Path(__file__).parent.parent
_SRC = _PROJECT_ROOT / 'src'
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import pytest

from virtual_drive.inmemory import InMemoryFileStorage
from virtual_drive.operations import FileOperations


@pytest.fixture
def storage():
    """Empty volatile storage, isolated per test."""
    return InMemoryFileStorage()


@pytest.fixture
def sample_storage():
    """Volatile storage seeded with the sample tree."""
    return InMemoryFileStorage(use_sample_data=True)


@pytest.fixture
def ops(storage):
    return FileOperations(storage)


@pytest.fixture
def sample_ops(sample_storage):
    return FileOperations(sample_storage)
