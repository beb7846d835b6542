"""
spclient.core.signin - Security token to session cookies
========================================================
"""

from __future__ import annotations

import logging

import requests

from spclient.core.errors import SessionCookieError
from spclient.core.result import Outcome
from spclient.core.session import SessionState, SharePointSession

SIGNIN_PATH = "_forms/default.aspx?wa=wsignin1.0"

logger = logging.getLogger("spclient.auth")


def validate_cookies(state: SessionState, url: str) -> None:
    """
    Check that the session holds both ``rtFa`` and ``FedAuth``.

    Raises
    ------
    SessionCookieError
        Listing the cookie names actually present.
    """
    if state.missing_cookies():
        received = state.cookie_names()
        logger.warning(
            "Missing session cookies %s after %s (got: %s)",
            state.missing_cookies(), url, ", ".join(received) or "none",
        )
        raise SessionCookieError(url, received)


class SessionEstablisher:
    """
    Trades a security token for the site's session cookies.

    The token is posted through the router so that ``Set-Cookie`` headers
    land in the shared session's cookie jar.
    """

    def __init__(self, sess: SharePointSession) -> None:
        self.sess = sess

    def try_establish(self, token: str) -> Outcome[SessionState]:
        state = self.sess.state
        try:
            r = self.sess.post(SIGNIN_PATH, data=token)
        except requests.RequestException as exc:
            return Outcome.failure(SessionCookieError(
                state.url(SIGNIN_PATH), state.cookie_names(),
                detail=f"Sign-in request failed ({exc}).",
            ))
        state.absorb_response_cookies(r)
        try:
            validate_cookies(state, r.url or state.url(SIGNIN_PATH))
        except SessionCookieError as exc:
            return Outcome.failure(exc)
        return Outcome.success(state)

    def establish(self, token: str) -> SessionState:
        """Sign in with ``token``, raising ``SessionCookieError`` on failure."""
        return self.try_establish(token).unwrap()
