"""
Pytest configuration and shared fixtures.
"""

import io
import json
from http.client import HTTPMessage
from typing import Any, Iterable, List, Optional, Tuple
from unittest.mock import Mock, patch

import pytest
import requests
from requests.adapters import HTTPAdapter
from requests.cookies import RequestsCookieJar
from urllib3.response import HTTPResponse

from spclient.core.session import SharePointConfig, SharePointSession


def build_response(
    status: int = 200,
    *,
    content: Any = b"",
    json_body: Any = None,
    cookies: Iterable[Tuple[str, str]] = (),
    url: str = "https://example.com/",
    headers: Optional[dict] = None,
) -> requests.Response:
    """A real ``requests.Response`` with an in-memory body."""
    r = requests.Response()
    r.status_code = status
    r.url = url
    if json_body is not None:
        content = json.dumps(json_body)
        r.headers["Content-Type"] = "application/json"
    if isinstance(content, str):
        content = content.encode("utf-8")
    r._content = content
    r._content_consumed = True
    r.encoding = "utf-8"
    if headers:
        r.headers.update(headers)
    jar = RequestsCookieJar()
    for name, value in cookies:
        jar.set(name, value)
    r.cookies = jar
    return r


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def mock_send():
    """Patch the transport; ``side_effect`` / ``return_value`` set per test."""
    with patch.object(requests.Session, "send") as send:
        yield send


class FakeWire:
    """
    Canned replies served at ``HTTPAdapter.send``, below ``requests.Session``.

    Replies are turned into responses by the adapter's own
    ``build_response``, so ``Set-Cookie`` headers reach the session jar the
    same way they do over a real connection.
    """

    def __init__(self) -> None:
        self.replies: List[dict] = []
        self.sent: List[requests.PreparedRequest] = []

    def reply(
        self,
        status: int = 200,
        *,
        content: Any = b"",
        json_body: Any = None,
        set_cookies: Iterable[Tuple[str, str]] = (),
    ) -> "FakeWire":
        self.replies.append({
            "status": status,
            "content": content,
            "json_body": json_body,
            "set_cookies": list(set_cookies),
        })
        return self

    @staticmethod
    def _raw(status, content, json_body, set_cookies) -> HTTPResponse:
        headers = {}
        if json_body is not None:
            content = json.dumps(json_body)
            headers["Content-Type"] = "application/json"
        if isinstance(content, str):
            content = content.encode("utf-8")
        msg = HTTPMessage()
        for name, value in set_cookies:
            msg["Set-Cookie"] = f"{name}={value}; path=/"
        return HTTPResponse(
            body=io.BytesIO(content),
            headers=headers,
            status=status,
            preload_content=False,
            original_response=Mock(msg=msg),
        )

    def send(self, adapter, request, **kwargs):
        self.sent.append(request)
        return adapter.build_response(request, self._raw(**self.replies.pop(0)))


@pytest.fixture
def wire():
    """Fake the network under the session so cookie extraction runs."""
    fake = FakeWire()
    with patch.object(HTTPAdapter, "send", autospec=True, side_effect=fake.send):
        yield fake


@pytest.fixture
def sp_session():
    """A router for https://example.com with no cookies yet."""
    sess = SharePointSession(SharePointConfig(base_url="https://example.com"))
    yield sess
    sess.close()


@pytest.fixture
def sharepoint_env(monkeypatch):
    monkeypatch.setenv("SHAREPOINT_USERNAME", "user")
    monkeypatch.setenv("SHAREPOINT_PASS", "pass")


@pytest.fixture
def security_token_xml():
    """Federation response carrying a token."""
    return """<?xml version="1.0" encoding="utf-8"?>
<S:Envelope xmlns:S="http://www.w3.org/2003/05/soap-envelope"
    xmlns:wsse="http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd"
    xmlns:wst="http://schemas.xmlsoap.org/ws/2005/02/trust">
  <S:Body>
    <wst:RequestSecurityTokenResponse>
      <wst:TokenType>urn:passport:compact</wst:TokenType>
      <wst:RequestedSecurityToken>
        <wsse:BinarySecurityToken Id="Compact0">t=EXAMPLE_TOKEN==&amp;p=</wsse:BinarySecurityToken>
      </wst:RequestedSecurityToken>
    </wst:RequestSecurityTokenResponse>
  </S:Body>
</S:Envelope>"""


@pytest.fixture
def federation_fault_xml():
    """Federation response for rejected credentials (still HTTP 200)."""
    return """<?xml version="1.0" encoding="utf-8"?>
<S:Envelope xmlns:S="http://www.w3.org/2003/05/soap-envelope"
    xmlns:psf="http://schemas.microsoft.com/Passport/SoapServices/SOAPFault">
  <S:Body>
    <S:Fault>
      <S:Code><S:Value>S:Sender</S:Value></S:Code>
      <S:Reason><S:Text xml:lang="en-US">Authentication Failure</S:Text></S:Reason>
      <S:Detail>
        <psf:error>
          <psf:value>0x80048821</psf:value>
          <psf:internalerror>
            <psf:code>0x80041012</psf:code>
            <psf:text>AADSTS50126: Invalid username or password.</psf:text>
          </psf:internalerror>
        </psf:error>
      </S:Detail>
    </S:Fault>
  </S:Body>
</S:Envelope>"""


@pytest.fixture
def context_info():
    """Flat /_api/contextinfo payload."""
    return {
        "FormDigestTimeoutSeconds": 1800,
        "FormDigestValue": "0x1234ABCD,18 Oct 2026 10:00:00 -0000",
        "LibraryVersion": "16.0.0.0",
        "WebFullUrl": "https://example.com/sites/team",
    }
