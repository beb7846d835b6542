"""
spclient.documents.transfer - File download and upload
======================================================
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from spclient.core.session import SharePointSession

logger = logging.getLogger("spclient.documents")

CHUNK_SIZE = 1024 * 1024

PathLike = Union[str, "os.PathLike[str]"]


def download(
    sess: SharePointSession,
    url: str,
    dest: Optional[PathLike],
    path_show: str,
    *,
    suffix: str = "",
    overwrite: bool = False,
) -> Path:
    """
    Stream ``url`` to ``dest`` in chunks.

    With ``dest=None`` a temporary file ending in ``suffix`` is created once
    the server has answered with the file.
    Data is written to a sibling temporary file first, so a failed download
    never leaves a truncated ``dest`` behind.

    Raises
    ------
    FileExistsError
        If ``dest`` exists and ``overwrite`` is False
    FileNotFoundError
        If the remote file does not exist
    SharePointUpstreamError
        For any other error status
    """
    if dest is not None:
        target = Path(dest)
        if target.exists() and not overwrite:
            raise FileExistsError(f"Destination '{target}' already exists; use overwrite=True")

    r = sess.get(url, stream=True)
    try:
        if r.status_code == 404:
            raise FileNotFoundError(f"Remote file '{path_show}' does not exist")
        sess.raise_for_error(r)

        created: Optional[Path] = None
        if dest is None:
            fd, name = tempfile.mkstemp(suffix=suffix)
            os.close(fd)
            target = created = Path(name)

        part: Optional[str] = None
        try:
            fd, part = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".part")
            with os.fdopen(fd, "wb") as fh:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
            os.replace(part, target)
        except BaseException:
            if part is not None:
                Path(part).unlink(missing_ok=True)
            if created is not None:
                created.unlink(missing_ok=True)
            raise
    finally:
        r.close()

    logger.info("Downloaded %s to %s", path_show, target)
    return target


def read_bytes(sess: SharePointSession, url: str, path_show: str) -> bytes:
    r = sess.get(url)
    if r.status_code == 404:
        raise FileNotFoundError(f"Remote file '{path_show}' does not exist")
    sess.raise_for_error(r)
    return r.content


def upload(sess: SharePointSession, url: str, src: PathLike, site: str) -> None:
    """Send the contents of ``src`` to ``url`` (streamed from disk)."""
    src = Path(src)
    with src.open("rb") as fh:
        r = sess.post(
            url,
            site=site,
            data=fh,
            headers={"Content-Type": "application/octet-stream"},
        )
    sess.raise_for_error(r)
    logger.info("Uploaded %s (%d bytes)", src, src.stat().st_size)
