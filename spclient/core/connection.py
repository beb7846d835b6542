"""
spclient.core.connection - High-level client
============================================

``SharePointClient`` owns one session and drives either the interactive
login (credentials -> token -> cookies) or restoration from saved
authentication data.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union, TYPE_CHECKING

import requests
from requests import Response

from spclient.core.auth_data import AuthDataCodec, AuthSource, CookiePairs
from spclient.core.credentials import Credentials
from spclient.core.digest import context_info_path
from spclient.core.errors import SessionCookieError
from spclient.core.result import Outcome
from spclient.core.session import (
    DEFAULT_FEDERATION_URL,
    SessionState,
    SharePointConfig,
    SharePointSession,
)
from spclient.core.signin import SessionEstablisher, validate_cookies
from spclient.core.token import TokenExchanger

if TYPE_CHECKING:
    from spclient.documents.folder import SharePointFolder

ENV_SITE_URL = "SHAREPOINT_URL"

logger = logging.getLogger("spclient.auth")


class SharePointClient:
    """
    Authenticated client for one SharePoint tenant.

    Without ``auth`` the client logs in with credentials (explicit, or
    ``SHAREPOINT_USERNAME`` / ``SHAREPOINT_PASS``). With ``auth`` it restores
    the session from data previously returned by ``get_auth_data``.

    Parameters
    ----------
    site_url : str, optional
        Root URL of the tenant. Falls back to SHAREPOINT_URL env var.
    auth : bytes or path, optional
        Saved authentication data
    credentials : Credentials, optional
        Login identity; read from the environment when omitted
    timeout : float, optional
        Request timeout in seconds (none by default)
    verify : bool or str
        SSL verification
    federation_url : str
        Token-issuing endpoint
    digest_ttl : float, optional
        Opt-in request digest caching, see ``DigestProvider``

    Examples
    --------
    >>> with SharePointClient("https://contoso.sharepoint.com") as client:
    ...     blob = client.get_auth_data()
    >>> restored = SharePointClient("https://contoso.sharepoint.com", auth=blob)
    >>> r = restored.get("/sites/team/_api/web")
    """

    def __init__(
        self,
        site_url: Optional[str] = None,
        auth: Optional[AuthSource] = None,
        *,
        credentials: Optional[Credentials] = None,
        timeout: Optional[float] = None,
        verify: Union[bool, str] = True,
        federation_url: str = DEFAULT_FEDERATION_URL,
        digest_ttl: Optional[float] = None,
        login: bool = True,
    ) -> None:
        site_url = (site_url or os.environ.get(ENV_SITE_URL, "")).rstrip("/")
        if not site_url:
            raise ValueError(
                f"Missing site_url. Set {ENV_SITE_URL} environment variable "
                "or pass site_url parameter."
            )

        self.cfg = SharePointConfig(
            base_url=site_url,
            timeout=timeout,
            verify=verify,
            federation_url=federation_url,
            digest_ttl=digest_ttl,
        )
        self.session = SharePointSession(self.cfg)

        if not login:
            return
        if auth is None:
            self.login(credentials)
        else:
            self.set_auth_data(auth)

    @property
    def site_url(self) -> str:
        return self.session.base_url

    @property
    def state(self) -> SessionState:
        return self.session.state

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "SharePointClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- login ----------------

    def try_login(self, credentials: Optional[Credentials] = None) -> Outcome[SessionState]:
        """
        Log in with username and password.

        ``credentials`` default to the environment; a missing variable still
        raises ``ValueError`` since nothing was attempted.
        """
        creds = credentials if credentials is not None else Credentials.from_env()
        exchanger = TokenExchanger(
            self.site_url,
            federation_url=self.cfg.federation_url,
            timeout=self.cfg.timeout,
            verify=self.cfg.verify,
        )
        token = exchanger.try_exchange(creds)
        if not token.ok:
            return Outcome.failure(token.error)  # type: ignore[arg-type]

        outcome = SessionEstablisher(self.session).try_establish(token.unwrap())
        if outcome.ok:
            logger.info("Signed in to %s as '%s'", self.site_url, creds.username)
        return outcome

    def login(self, credentials: Optional[Credentials] = None) -> SessionState:
        return self.try_login(credentials).unwrap()

    # ---------------- auth data ----------------

    def get_auth_data(self, file: Optional[Union[str, "os.PathLike[str]"]] = None) -> Union[bytes, Path]:
        """
        Export the session cookies for later ``set_auth_data``.

        Returns the blob, or the path it was written to when ``file`` is given.
        """
        return AuthDataCodec.encode(self.state, file)

    def try_set_auth_data(self, auth: AuthSource) -> Outcome[SessionState]:
        decoded = AuthDataCodec.try_decode(auth)
        if not decoded.ok:
            return Outcome.failure(decoded.error)  # type: ignore[arg-type]
        return self._restore(decoded.unwrap())

    def set_auth_data(self, auth: AuthSource) -> SessionState:
        """
        Restore a session from saved authentication data and confirm with
        the server that it is still accepted.

        Raises
        ------
        BlobDecodeError
            If ``auth`` cannot be read.
        SessionCookieError
            If the server rejects the session or the cookies are incomplete.
        """
        return self.try_set_auth_data(auth).unwrap()

    def _restore(self, pairs: CookiePairs) -> Outcome[SessionState]:
        state = self.state
        state.install_cookies(pairs)
        path = context_info_path()
        url = state.url(path)
        try:
            r = self.session.post(path, headers={"Accept": "application/json"})
        except requests.RequestException as exc:
            return Outcome.failure(SessionCookieError(
                url, state.cookie_names(), detail=f"Could not confirm restored session ({exc})."
            ))
        state.absorb_response_cookies(r)

        if not 200 <= r.status_code < 300:
            return Outcome.failure(SessionCookieError(
                url, state.cookie_names(),
                detail=f"Restored session was rejected (status {r.status_code}).",
            ))
        try:
            validate_cookies(state, url)
        except SessionCookieError as exc:
            return Outcome.failure(exc)

        logger.info("Restored session for %s", self.site_url)
        return Outcome.success(state)

    # ---------------- requests ----------------

    def get(self, path: str, **kwargs: Any) -> Response:
        return self.session.get(path, **kwargs)

    def post(self, path: str, *, site: Optional[str] = None, **kwargs: Any) -> Response:
        return self.session.post(path, site=site, **kwargs)

    def delete(self, path: str, *, site: Optional[str] = None, **kwargs: Any) -> Response:
        return self.session.delete(path, site=site, **kwargs)

    def digest(self, site: str) -> Dict[str, str]:
        """Request digest header for ``site``."""
        return self.session.digests.fetch(site)

    def folder(self, site: str, path: str, verify: bool = False) -> "SharePointFolder":
        """
        Get a folder object for ``path`` on ``site``.

        Parameters
        ----------
        site : str
            Site name, e.g. "team"
        path : str
            Folder path within the site, e.g. "Shared Documents"
        verify : bool
            Check that the folder exists
        """
        # Import here to avoid circular imports
        from spclient.documents.folder import SharePointFolder
        return SharePointFolder(self, site, path, verify=verify)
