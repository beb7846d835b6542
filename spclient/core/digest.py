"""
spclient.core.digest - Request digest (anti-forgery token)
==========================================================

SharePoint rejects state-changing calls unless they carry a site-scoped
``X-RequestDigest`` header obtained from ``/_api/contextinfo``.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple, TYPE_CHECKING
import logging
import threading
import time

import requests

from spclient.core.errors import DigestError
from spclient.core.models import ContextInfo
from spclient.core.result import Outcome

if TYPE_CHECKING:
    from spclient.core.session import SharePointSession

DIGEST_HEADER = "X-RequestDigest"

# subtracted from the server-advertised lifetime when caching
_EXPIRY_MARGIN = 60.0

logger = logging.getLogger("spclient.auth")


def context_info_path(site: Optional[str] = None) -> str:
    """Path of the context-info endpoint for ``site`` (or the root site)."""
    if site:
        return f"/sites/{site}/_api/contextinfo"
    return "/_api/contextinfo"


class DigestProvider:
    """
    Fetches request digests through an authenticated session.

    By default every call performs exactly one POST, so each write gets a
    fresh digest. With ``ttl`` set, digests are cached per site for
    ``min(ttl, FormDigestTimeoutSeconds - 60)`` seconds; this lowers
    request volume and is opt-in.

    Parameters
    ----------
    sess : SharePointSession
        Router used for the context-info call
    ttl : float, optional
        Upper bound for caching, in seconds
    """

    def __init__(self, sess: "SharePointSession", *, ttl: Optional[float] = None) -> None:
        self.sess = sess
        self.ttl = ttl
        self._cache: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def _fetch_context_info(self, site: str) -> Outcome[ContextInfo]:
        path = context_info_path(site)
        try:
            r = self.sess.post(path, headers={"Accept": "application/json"})
        except requests.RequestException as exc:
            return Outcome.failure(DigestError(site, f"request to {path} failed ({exc})"))

        if not 200 <= r.status_code < 300:
            return Outcome.failure(DigestError(site, f"{path} returned status {r.status_code}"))

        try:
            payload = r.json()
        except ValueError:
            return Outcome.failure(DigestError(site, f"{path} did not return JSON"))

        try:
            info = ContextInfo.from_payload(payload)
        except ValueError as exc:
            return Outcome.failure(DigestError(site, str(exc).splitlines()[0]))
        return Outcome.success(info)

    def _lifetime(self, info: ContextInfo) -> float:
        lifetime = float(self.ttl or 0.0)
        if info.form_digest_timeout_seconds:
            lifetime = min(lifetime, info.form_digest_timeout_seconds - _EXPIRY_MARGIN)
        return lifetime

    def try_fetch(self, site: str) -> Outcome[Dict[str, str]]:
        """
        Get the digest header for ``site``.

        Returns
        -------
        Outcome
            ``{"X-RequestDigest": value}`` on success, ``DigestError`` otherwise
        """
        if self.ttl is None:
            outcome = self._fetch_context_info(site)
            if not outcome.ok:
                return Outcome.failure(outcome.error)  # type: ignore[arg-type]
            return Outcome.success({DIGEST_HEADER: outcome.unwrap().form_digest_value})

        with self._lock:
            cached = self._cache.get(site)
            if cached and cached[1] > time.monotonic():
                return Outcome.success({DIGEST_HEADER: cached[0]})

            outcome = self._fetch_context_info(site)
            if not outcome.ok:
                self._cache.pop(site, None)
                return Outcome.failure(outcome.error)  # type: ignore[arg-type]

            info = outcome.unwrap()
            lifetime = self._lifetime(info)
            if lifetime > 0:
                self._cache[site] = (info.form_digest_value, time.monotonic() + lifetime)
                logger.debug("Cached digest for site %s for %.0fs", site, lifetime)
            return Outcome.success({DIGEST_HEADER: info.form_digest_value})

    def fetch(self, site: str) -> Dict[str, str]:
        """Like ``try_fetch`` but raises ``DigestError`` on failure."""
        return self.try_fetch(site).unwrap()

    def invalidate(self, site: Optional[str] = None) -> None:
        """Drop cached digests for ``site``, or all of them."""
        with self._lock:
            if site is None:
                self._cache.clear()
            else:
                self._cache.pop(site, None)
