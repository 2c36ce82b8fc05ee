"""HTTP surface for the virtual drive."""

from .app import create_app
from .router import create_file_router

__all__ = ["create_app", "create_file_router"]
