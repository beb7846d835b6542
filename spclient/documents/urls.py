"""
spclient.documents.urls - REST path builders
============================================
"""

from __future__ import annotations

import posixpath
from typing import Optional
from urllib.parse import quote


def escape_odata_literal(value: str) -> str:
    """
    Escape a string for use inside a quoted OData literal.

    Examples
    --------
    >>> escape_odata_literal("O'Brien")
    "O''Brien"
    """
    return value.replace("'", "''")


def _literal(value: str) -> str:
    return quote(escape_odata_literal(value), safe="/")


def join_path(base: str, path: Optional[str] = None) -> str:
    """``base`` joined with ``path``, or ``base`` itself when ``path`` is None."""
    if path is None:
        return base
    return posixpath.join(base, path)


def folder_url(site: str, folder: str) -> str:
    return f"/sites/{site}/_api/web/GetFolderByServerRelativeURL('{_literal(folder)}')"


def folder_file_url(site: str, folder: str, path: str) -> str:
    """Folder URL for the folder that contains ``path`` (relative to ``folder``)."""
    filename = posixpath.basename(path)
    if filename != path:
        folder = posixpath.join(folder, posixpath.dirname(path))
    return folder_url(site, folder)


def file_value_url(site: str, folder: str, path: str) -> str:
    name = _literal(posixpath.basename(path))
    return f"{folder_file_url(site, folder, path)}/Files('{name}')/$value"


def file_add_url(site: str, folder: str, path: str) -> str:
    name = _literal(posixpath.basename(path))
    return f"{folder_file_url(site, folder, path)}/Files/Add(url='{name}',overwrite=true)"


def folders_collection_url(site: str) -> str:
    return f"/sites/{site}/_api/web/folders"
