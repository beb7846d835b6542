"""
spclient.documents.models - Folder listing entries
==================================================
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FileEntry(BaseModel):
    """A file as reported by ``.../files``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(alias="Name")
    # documented as a long, sent as a string
    size: int = Field(alias="Length")
    created: datetime = Field(alias="TimeCreated")
    modified: datetime = Field(alias="TimeLastModified")


class FolderEntry(BaseModel):
    """A folder as reported by ``.../folders``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(alias="Name")
    items: int = Field(alias="ItemCount")
    created: datetime = Field(alias="TimeCreated")
    modified: datetime = Field(alias="TimeLastModified")


class FolderItem(BaseModel):
    """Combined listing row; ``size`` is None for folders, ``items`` for files."""

    name: str
    items: Optional[int] = None
    size: Optional[int] = None
    is_folder: bool
    created: datetime
    modified: datetime

    @classmethod
    def from_folder(cls, entry: FolderEntry) -> "FolderItem":
        return cls(name=entry.name, items=entry.items, is_folder=True,
                   created=entry.created, modified=entry.modified)

    @classmethod
    def from_file(cls, entry: FileEntry) -> "FolderItem":
        return cls(name=entry.name, size=entry.size, is_folder=False,
                   created=entry.created, modified=entry.modified)
