"""
spclient.documents - Document library access
============================================

Folder and file operations built on an authenticated session:

- SharePointFolder: list, create, recycle, download, upload
- FileEntry / FolderEntry / FolderItem: listing rows

"""

from spclient.documents.folder import SharePointFolder
from spclient.documents.models import FileEntry, FolderEntry, FolderItem
from spclient.documents.urls import escape_odata_literal

__all__ = [
    "SharePointFolder",
    "FileEntry",
    "FolderEntry",
    "FolderItem",
    "escape_odata_literal",
]
