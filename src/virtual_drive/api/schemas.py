"""Pydantic schemas for file operation requests."""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

FileAction = Literal["createFolder", "createFile", "rename", "copy", "move"]


class FileActionRequest(BaseModel):
    """Request body for POST /api/files."""
    model_config = ConfigDict(populate_by_name=True)

    # Checked against FileAction by the router: an unknown action is a 400.
    action: str
    name: Optional[str] = None
    item_id: Optional[str] = Field(default=None, alias="itemId")
    target_path: Optional[str] = Field(default=None, alias="targetPath")
    content: str = ""
    size: int = Field(default=0, ge=0)


class DeleteRequest(BaseModel):
    """Request body for DELETE /api/files."""
    model_config = ConfigDict(populate_by_name=True)

    item_id: Optional[str] = Field(default=None, alias="itemId")
