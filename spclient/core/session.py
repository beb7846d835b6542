"""
spclient.core.session - Session state and request routing
=========================================================

Low-level HTTP plumbing for SharePoint REST calls:
- ``SharePointConfig``: connection configuration
- ``SessionState``: one base URL bound to one cookie jar
- ``SharePointSession``: GET/POST/DELETE against ``{base_url}/{path}`` through
  the shared session, attaching a request digest for site-scoped writes
- Extraction of OData error bodies from failed responses
"""

from __future__ import annotations

from dataclasses import dataclass
from http.cookiejar import Cookie
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import copy
import logging
import time

import requests
from requests import Response, Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from spclient.core.digest import DigestProvider
from spclient.core.errors import SharePointUpstreamError

REQUIRED_COOKIES: Tuple[str, str] = ("rtFa", "FedAuth")
DEFAULT_FEDERATION_URL = "https://login.microsoftonline.com/extSTS.srf"

CookiePairs = List[Tuple[str, str]]


def _required_first(cookie: Cookie) -> int:
    if cookie.name in REQUIRED_COOKIES:
        return REQUIRED_COOKIES.index(cookie.name)
    return len(REQUIRED_COOKIES)


@dataclass
class SharePointConfig:
    """
    Connection configuration for a SharePoint site collection.

    Parameters
    ----------
    base_url : str
        Root URL of the tenant, e.g. "https://contoso.sharepoint.com"
    timeout : float, optional
        Per-request timeout in seconds. ``None`` (default) waits forever.
    verify : bool or str
        SSL verification (True, False, or path to CA bundle)
    user_agent : str
        User-Agent header value
    federation_url : str
        Endpoint exchanging credentials for a SAML security token
    digest_ttl : float, optional
        Cache request digests per site for at most this many seconds.
        ``None`` (default) fetches a fresh digest for every write.

    Examples
    --------
    >>> cfg = SharePointConfig(base_url="https://contoso.sharepoint.com", timeout=30)
    """
    base_url: str
    timeout: Optional[float] = None
    verify: Union[bool, str] = True
    user_agent: str = "spclient/0.1"
    federation_url: str = DEFAULT_FEDERATION_URL
    digest_ttl: Optional[float] = None


class SessionState:
    """
    Authenticated connection: a base URL and the cookie jar of its
    ``requests.Session``.

    Written by sign-in and by restoration, read by every request. Not safe
    to share between threads without external locking.
    """

    def __init__(self, base_url: str, http: Optional[Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def cookie_names(self) -> List[str]:
        """Names of all cookies in the jar, without duplicates."""
        names: List[str] = []
        for cookie in self.http.cookies:
            if cookie.name not in names:
                names.append(cookie.name)
        return names

    def _cookie_value(self, name: str) -> Optional[str]:
        # jar.get() raises on same-name cookies from several domains
        for cookie in self.http.cookies:
            if cookie.name == name:
                return cookie.value
        return None

    def missing_cookies(self) -> List[str]:
        names = set(self.cookie_names())
        return [n for n in REQUIRED_COOKIES if n not in names]

    def auth_cookies(self) -> CookiePairs:
        """The ``rtFa`` / ``FedAuth`` pairs, in that order, that are present."""
        pairs: CookiePairs = []
        for name in REQUIRED_COOKIES:
            value = self._cookie_value(name)
            if value is not None:
                pairs.append((name, value))
        return pairs

    def install_cookies(self, pairs: Sequence[Tuple[str, str]]) -> None:
        for name, value in pairs:
            self.http.cookies.set(name, value)

    def absorb_response_cookies(self, response: Response) -> None:
        """
        Copy cookies set by ``response`` and its redirect hops into the jar,
        then reorder the jar so ``rtFa`` and ``FedAuth`` come first.

        ``requests`` stores ``Set-Cookie`` values in server order and a
        replaced cookie keeps its old slot. The outgoing ``Cookie`` header
        follows jar order, so it is rebuilt here to match a session restored
        from saved pairs.
        """
        jar = self.http.cookies
        for r in list(response.history or []) + [response]:
            for cookie in r.cookies:
                jar.set_cookie(copy.copy(cookie))

        cookies = sorted(jar, key=_required_first)
        jar.clear()
        for cookie in cookies:
            jar.set_cookie(cookie)

    def cookie_header(self, path: str = "") -> str:
        """The ``Cookie`` header the next request to ``path`` would carry."""
        prepared = self.http.prepare_request(requests.Request("GET", self.url(path)))
        return prepared.headers.get("Cookie", "")


class SharePointSession:
    """
    Request router for the SharePoint REST API.

    Every call goes through the single ``requests.Session`` held by
    ``state`` so cookies persist across calls. No retries are performed.

    Parameters
    ----------
    cfg : SharePointConfig
        Connection configuration
    state : SessionState, optional
        Existing session state to route through; a fresh one is built
        otherwise.

    Examples
    --------
    >>> with SharePointSession(cfg) as sess:
    ...     r = sess.get("/sites/team/_api/web")
    ...     r = sess.post("/sites/team/_api/web/folders", site="team", json=body)
    """

    def __init__(self, cfg: SharePointConfig, state: Optional[SessionState] = None) -> None:
        self.cfg = cfg
        self.timeout = cfg.timeout
        self.verify = cfg.verify
        self.logger = logging.getLogger("spclient.http")

        self.state = state if state is not None else SessionState(cfg.base_url, self._build_http())
        self.digests = DigestProvider(self, ttl=cfg.digest_ttl)

    @property
    def base_url(self) -> str:
        return self.state.base_url

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.state.http.close()

    def __enter__(self) -> "SharePointSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- session ----------------

    def _build_http(self) -> Session:
        sess = requests.Session()
        sess.headers.update({
            "Accept": "application/json",
            "User-Agent": self.cfg.user_agent,
        })

        # failures surface to the caller immediately
        retry = Retry(total=0, raise_on_status=False)
        adapter = HTTPAdapter(max_retries=retry)
        sess.mount("https://", adapter)
        sess.mount("http://", adapter)
        return sess

    # ---------------- errors ----------------

    def _extract_sp_error(self, r: Response) -> str:
        try:
            data = r.json()
        except ValueError:
            return r.text
        if not isinstance(data, dict):
            return r.text
        err = data.get("error") or data.get("odata.error")
        if not isinstance(err, dict):
            return r.text

        code = err.get("code")
        message = None
        if isinstance(err.get("message"), dict):
            message = err["message"].get("value")
        elif isinstance(err.get("message"), str):
            message = err.get("message")

        parts = []
        if code:
            parts.append(f"code={code}")
        if message:
            parts.append(f"message={message}")
        return " | ".join(parts) or r.text

    def raise_for_error(self, r: Response) -> None:
        """Raise ``SharePointUpstreamError`` for a 4xx/5xx response."""
        if r.status_code >= 400:
            body = self._extract_sp_error(r)
            raise SharePointUpstreamError(r.status_code, body, r.url, dict(r.headers))

    # ---------------- routing ----------------

    def request(
        self,
        method: str,
        path: str,
        *,
        site: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> Response:
        """
        Send ``method`` to ``{base_url}/{path}``.

        Parameters
        ----------
        method : str
            HTTP verb
        path : str
            Path relative to the base URL
        site : str, optional
            When given, a request digest for this site is fetched and sent as
            ``X-RequestDigest``.
        headers : dict, optional
            Extra headers, merged over the session defaults
        **kwargs
            Passed on to ``requests.Session.request`` (``data``, ``json``,
            ``params``, ``stream`` ...)

        Returns
        -------
        requests.Response
            The response, whatever its status.
        """
        url = self.state.url(path)
        merged: Dict[str, str] = dict(headers or {})
        if site is not None:
            merged.update(self.digests.fetch(site))

        kwargs.setdefault("timeout", self.timeout)
        kwargs.setdefault("verify", self.verify)

        t0 = time.perf_counter()
        r = self.state.http.request(method=method, url=url, headers=merged or None, **kwargs)
        dt = (time.perf_counter() - t0) * 1000.0
        self.logger.debug("%s %s %s %sms", method.upper(), url, r.status_code, round(dt, 1))
        return r

    def get(self, path: str, **kwargs: Any) -> Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, *, site: Optional[str] = None, **kwargs: Any) -> Response:
        return self.request("POST", path, site=site, **kwargs)

    def delete(self, path: str, *, site: Optional[str] = None, **kwargs: Any) -> Response:
        return self.request("DELETE", path, site=site, **kwargs)
