"""Document tree domain models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FileSystemItem(BaseModel):
    """A file or folder in the document tree.

    Attributes:
        name: Display name, extension excluded for files.
        path: Logical path relative to the data root, extension excluded for files.
        type: Either "file" or "folder".
        children: Nested items for folders, folders first then alphabetical.
    """

    name: str
    path: str
    type: Literal["file", "folder"]
    children: list["FileSystemItem"] = []


class RenameOperation(BaseModel):
    """One rename performed to resolve a case-insensitive name collision."""

    model_config = ConfigDict(populate_by_name=True)

    old_path: str = Field(alias="oldPath")
    new_path: str = Field(alias="newPath")


class TrashItem(BaseModel):
    """An entry of the trash root as shown to clients."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    path: str  # trash identifier, the suffixed physical name
    type: Literal["file", "folder"]
    original_path: str = Field(alias="originalPath")
    trashed_at: datetime | None = Field(default=None, alias="trashedAt")


class RenameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_path: str = Field(alias="newPath")
