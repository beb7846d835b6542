"""
spclient.core.errors - Exception hierarchy
==========================================

Every failing step of the login/session lifecycle has its own exception
type so callers can decide whether to retry a fresh login or give up.
Messages name the failing step and, where relevant, the username or the
cookie names received. Passwords never appear in messages.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence


class SharePointError(RuntimeError):
    """Base exception for all spclient errors."""


class AuthRequestError(SharePointError):
    """The federation endpoint call failed or returned a non-success status."""

    def __init__(self, username: str, detail: Optional[str] = None):
        msg = f"Failed to authenticate user '{username}'."
        if detail:
            msg = f"{msg} {detail}"
        super().__init__(msg)
        self.username = username


class TokenNotFoundError(SharePointError):
    """The federation response did not carry a security token."""

    def __init__(self, username: str, reason: Optional[str] = None):
        msg = f"Failed to retrieve security token for user '{username}'."
        if reason:
            msg = f"{msg} Federation endpoint said: {reason}"
        super().__init__(msg)
        self.username = username
        self.reason = reason


class SessionCookieError(SharePointError):
    """
    The required session cookies are absent.

    Attributes
    ----------
    url : str
        URL whose response was expected to set the cookies
    received : list of str
        Names of the cookies that were actually present
    """

    def __init__(self, url: str, received: Sequence[str], detail: Optional[str] = None):
        self.url = url
        self.received: List[str] = list(received)
        msg = (
            f"Failed to retrieve all required cookies from URL '{url}'.\n"
            f"Must provide rtFa and FedAuth cookies, got {', '.join(self.received)}"
        )
        if detail:
            msg = f"{detail}\n{msg}"
        super().__init__(msg)


class DigestError(SharePointError):
    """The context-info call failed or carried no FormDigestValue."""

    def __init__(self, site: Optional[str], detail: str):
        where = f"site '{site}'" if site else "the root site"
        super().__init__(f"Failed to obtain request digest for {where}: {detail}")
        self.site = site


class BlobDecodeError(SharePointError):
    """Persisted authentication data could not be read."""


class SharePointUpstreamError(SharePointError):
    """
    Exception raised when the SharePoint REST API returns an error status.

    Attributes
    ----------
    status : int
        HTTP status code
    body : str
        Response body or extracted OData error text
    url : str
        The URL that was called
    headers : dict
        Response headers
    """

    def __init__(
        self,
        status: int,
        body: str,
        url: str,
        headers: Optional[Dict[str, str]] = None
    ):
        snippet = (body or "")[:1200]
        super().__init__(f"SharePoint upstream error {status} for {url}: {snippet}")
        self.status = status
        self.body = body or ""
        self.url = url
        self.headers = headers or {}
