"""
spclient.core.token - SAML security token exchange
==================================================

Sends a WS-Trust RequestSecurityToken envelope carrying the user's
credentials to the federation endpoint and pulls the
``BinarySecurityToken`` out of the reply.
"""

from __future__ import annotations

from string import Template
from typing import Optional
from xml.sax.saxutils import escape
import logging

import requests

from spclient.core.credentials import Credentials
from spclient.core.errors import AuthRequestError, TokenNotFoundError
from spclient.core.models import FederationResponse
from spclient.core.result import Outcome
from spclient.core.session import DEFAULT_FEDERATION_URL

logger = logging.getLogger("spclient.auth")

SECURITY_TOKEN_REQUEST = Template("""\
<s:Envelope xmlns:s="http://www.w3.org/2003/05/soap-envelope"
      xmlns:a="http://www.w3.org/2005/08/addressing"
      xmlns:u="http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-utility-1.0.xsd">
  <s:Header>
    <a:Action s:mustUnderstand="1">http://schemas.xmlsoap.org/ws/2005/02/trust/RST/Issue</a:Action>
    <a:ReplyTo>
      <a:Address>http://www.w3.org/2005/08/addressing/anonymous</a:Address>
    </a:ReplyTo>
    <a:To s:mustUnderstand="1">https://login.microsoftonline.com/extSTS.srf</a:To>
    <o:Security s:mustUnderstand="1"
       xmlns:o="http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd">
      <o:UsernameToken>
        <o:Username>$username</o:Username>
        <o:Password>$password</o:Password>
      </o:UsernameToken>
    </o:Security>
  </s:Header>
  <s:Body>
    <t:RequestSecurityToken xmlns:t="http://schemas.xmlsoap.org/ws/2005/02/trust">
      <wsp:AppliesTo xmlns:wsp="http://schemas.xmlsoap.org/ws/2004/09/policy">
        <a:EndpointReference>
          <a:Address>$root_url</a:Address>
        </a:EndpointReference>
      </wsp:AppliesTo>
      <t:KeyType>http://schemas.xmlsoap.org/ws/2005/05/identity/NoProofKey</t:KeyType>
      <t:RequestType>http://schemas.xmlsoap.org/ws/2005/02/trust/Issue</t:RequestType>
      <t:TokenType>urn:oasis:names:tc:SAML:1.0:assertion</t:TokenType>
    </t:RequestSecurityToken>
  </s:Body>
</s:Envelope>
""")


def prepare_security_token_payload(root_url: str, credentials: Credentials) -> str:
    """
    Build the token request body for ``root_url``.

    All substituted values are XML-escaped, so passwords containing
    ``<``, ``&`` and the like are sent intact.
    """
    return SECURITY_TOKEN_REQUEST.substitute(
        root_url=escape(root_url),
        username=escape(credentials.username),
        password=escape(credentials.password),
    )


class TokenExchanger:
    """
    Exchanges credentials for a SAML security token.

    Parameters
    ----------
    root_url : str
        Site the token is requested for
    http : requests.Session, optional
        Session for the federation call. Kept apart from the site session so
        identity-provider cookies stay out of its jar.
    federation_url : str
        Federation endpoint
    timeout : float, optional
        Request timeout in seconds
    verify : bool or str
        SSL verification
    """

    def __init__(
        self,
        root_url: str,
        *,
        http: Optional[requests.Session] = None,
        federation_url: str = DEFAULT_FEDERATION_URL,
        timeout: Optional[float] = None,
        verify=True,
    ) -> None:
        self.http = http
        self.root_url = root_url.rstrip("/")
        self.federation_url = federation_url
        self.timeout = timeout
        self.verify = verify

    def try_exchange(self, credentials: Credentials) -> Outcome[str]:
        username = credentials.username
        payload = prepare_security_token_payload(self.root_url, credentials)
        try:
            post = self.http.post if self.http is not None else requests.post
            r = post(
                self.federation_url,
                data=payload.encode("utf-8"),
                headers={"Content-Type": "application/soap+xml; charset=utf-8"},
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as exc:
            return Outcome.failure(AuthRequestError(username, f"Federation request failed: {exc}"))

        if r.status_code != 200:
            return Outcome.failure(
                AuthRequestError(username, f"Federation endpoint returned status {r.status_code}.")
            )

        decoded = FederationResponse.from_xml(r.content)
        if not decoded.token:
            return Outcome.failure(TokenNotFoundError(username, decoded.fault))

        logger.debug("Received security token for user '%s'", username)
        return Outcome.success(decoded.token)

    def exchange(self, credentials: Credentials) -> str:
        """Return the security token, raising ``AuthRequestError`` or ``TokenNotFoundError``."""
        return self.try_exchange(credentials).unwrap()
