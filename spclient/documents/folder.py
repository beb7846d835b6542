"""
spclient.documents.folder - Folder-scoped document operations
=============================================================

Listing, creating and recycling folders, and moving files in and out of
a document library folder.
"""

from __future__ import annotations

import json
import logging
import posixpath
from pathlib import Path
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from spclient.core.connection import SharePointClient

from spclient.core.session import SharePointSession
from spclient.documents import transfer
from spclient.documents.models import FileEntry, FolderEntry, FolderItem
from spclient.documents.urls import (
    file_add_url,
    file_value_url,
    folder_url,
    folders_collection_url,
    join_path,
)

logger = logging.getLogger("spclient.documents")

_VERBOSE_JSON = "application/json;odata=verbose"


def _results(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    return payload.get("d", {}).get("results") or payload.get("value") or []


class SharePointFolder:
    """
    A folder inside a SharePoint site.

    Parameters
    ----------
    connection : SharePointClient or SharePointSession
        Authenticated client
    site : str
        Name of the site, e.g. "team"
    path : str
        Folder path within the site. "Shared Documents" is the usual
        root of the "Documents" library.
    verify : bool
        Check that the folder exists (one extra request)

    Examples
    --------
    >>> docs = client.folder("team", "Shared Documents")
    >>> [item.name for item in docs.list()]
    ['Reports', 'notes.txt']
    >>> docs.download("Reports/q3.xlsx", "q3.xlsx")
    """

    def __init__(
        self,
        connection: "SharePointClient | SharePointSession",
        site: str,
        path: str,
        verify: bool = False,
    ) -> None:
        from spclient.core.connection import SharePointClient

        if isinstance(connection, SharePointClient):
            self._session = connection.session
        elif isinstance(connection, SharePointSession):
            self._session = connection
        else:
            raise TypeError(
                f"Expected SharePointClient or SharePointSession, got {type(connection)}"
            )
        self._site = site
        self._path = path

        if verify:
            r = self._session.get(folder_url(site, path))
            if r.status_code == 404:
                raise FileNotFoundError(f"Path '{path}' was not found on site '{site}'")
            self._session.raise_for_error(r)

    @property
    def site(self) -> str:
        return self._site

    @property
    def path(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"SharePointFolder(site={self._site!r}, path={self._path!r})"

    def _get_json(self, url: str) -> Dict[str, Any]:
        r = self._session.get(url)
        self._session.raise_for_error(r)
        return r.json()

    # ---------------- listing ----------------

    def files(self, path: Optional[str] = None) -> List[FileEntry]:
        """List files in this folder, or in ``path`` relative to it."""
        url = folder_url(self._site, join_path(self._path, path)) + "/files"
        return [FileEntry.model_validate(x) for x in _results(self._get_json(url))]

    def folders(self, path: Optional[str] = None) -> List[FolderEntry]:
        """List sub-folders of this folder, or of ``path`` relative to it."""
        url = folder_url(self._site, join_path(self._path, path)) + "/folders"
        return [FolderEntry.model_validate(x) for x in _results(self._get_json(url))]

    def list(self, path: Optional[str] = None) -> List[FolderItem]:
        """Folders followed by files, as one listing."""
        items = [FolderItem.from_folder(f) for f in self.folders(path)]
        items.extend(FolderItem.from_file(f) for f in self.files(path))
        return items

    # ---------------- navigation ----------------

    def parent(self, verify: bool = False) -> "SharePointFolder":
        return SharePointFolder(self._session, self._site, posixpath.dirname(self._path), verify)

    def folder(self, path: str, verify: bool = False) -> "SharePointFolder":
        return SharePointFolder(self._session, self._site, posixpath.join(self._path, path), verify)

    # ---------------- changes ----------------

    def create(self, path: str) -> "SharePointFolder":
        """
        Create ``path`` (relative to this folder) and return it.

        The folders endpoint only accepts the verbose OData content type;
        plain "application/json" gets a 400.
        """
        full = posixpath.join(self._path, path)
        body = json.dumps({
            "__metadata": {"type": "SP.Folder"},
            "ServerRelativeUrl": full,
        })
        r = self._session.post(
            folders_collection_url(self._site),
            site=self._site,
            data=body,
            headers={"Content-Type": _VERBOSE_JSON, "Accept": _VERBOSE_JSON},
        )
        self._session.raise_for_error(r)
        logger.info("Created folder %s:%s", self._site, full)
        return self.folder(path, verify=False)

    def delete(self, path: Optional[str], check: str) -> None:
        """
        Send a folder to the recycle bin.

        Parameters
        ----------
        path : str or None
            Folder to delete, relative to this one; None for this folder.
        check : str
            Name of a file directly inside that folder. Guards against
            recycling the wrong (or an entire) library by mistake.

        Raises
        ------
        FileNotFoundError
            If ``check`` is not in the folder.
        """
        names = [f.name for f in self.files(path)]
        if check not in names:
            raise FileNotFoundError(
                f"The file '{check}' was not found in the folder to delete '{path}'"
            )
        url = folder_url(self._site, join_path(self._path, path)) + "/recycle()"
        r = self._session.delete(url, site=self._site, headers={"If-Match": "*"})
        self._session.raise_for_error(r)
        logger.info("Recycled folder %s:%s", self._site, join_path(self._path, path))

    # ---------------- transfer ----------------

    def _show(self, path: str) -> str:
        return f"{self._site}:{self._path}/{path}"

    def download(
        self,
        path: str,
        dest: Optional[transfer.PathLike] = None,
        overwrite: bool = False,
    ) -> Path:
        """
        Download ``path`` (relative to this folder).

        Parameters
        ----------
        path : str
            Remote file
        dest : str or Path, optional
            Local destination. Defaults to a temporary file with the same
            extension as ``path``.
        overwrite : bool
            Replace ``dest`` if it already exists

        Returns
        -------
        Path
            Where the file was written
        """
        url = file_value_url(self._site, self._path, path)
        suffix = posixpath.splitext(path)[1]
        return transfer.download(self._session, url, dest, self._show(path),
                                 suffix=suffix, overwrite=overwrite)

    def read_bytes(self, path: str) -> bytes:
        """Contents of remote file ``path`` in memory."""
        url = file_value_url(self._site, self._path, path)
        return transfer.read_bytes(self._session, url, self._show(path))

    def upload(self, path: transfer.PathLike, dest: Optional[str] = None) -> None:
        """
        Upload local file ``path`` into this folder, overwriting any file of
        the same name. ``dest`` is the remote path relative to this folder,
        defaulting to the local file name.
        """
        dest = dest or Path(path).name
        url = file_add_url(self._site, self._path, dest)
        transfer.upload(self._session, url, path, self._site)
