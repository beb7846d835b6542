"""
SharePoint REST client (spclient)
=================================

Logs in to SharePoint Online through the federated identity provider,
keeps the resulting session cookies, and sends authenticated REST calls.

Usage
-----
>>> from spclient import SharePointClient
>>>
>>> # SHAREPOINT_USERNAME / SHAREPOINT_PASS from the environment
>>> with SharePointClient("https://contoso.sharepoint.com") as client:
...     docs = client.folder("team", "Shared Documents")
...     print([item.name for item in docs.list()])
...     blob = client.get_auth_data()
>>>
>>> # later, without logging in again
>>> client = SharePointClient("https://contoso.sharepoint.com", auth=blob)

Subpackages
-----------
- spclient.core: Credentials, token exchange, session cookies, digests
- spclient.documents: Folder and file operations

"""

__version__ = "0.1.0"

from spclient.core import (
    AuthDataCodec,
    AuthRequestError,
    BlobDecodeError,
    Credentials,
    DigestError,
    Outcome,
    SessionCookieError,
    SessionState,
    SharePointClient,
    SharePointConfig,
    SharePointError,
    SharePointSession,
    SharePointUpstreamError,
    TokenNotFoundError,
)
from spclient.documents import SharePointFolder

__all__ = [
    "__version__",
    "AuthDataCodec",
    "AuthRequestError",
    "BlobDecodeError",
    "Credentials",
    "DigestError",
    "Outcome",
    "SessionCookieError",
    "SessionState",
    "SharePointClient",
    "SharePointConfig",
    "SharePointError",
    "SharePointSession",
    "SharePointUpstreamError",
    "TokenNotFoundError",
    "SharePointFolder",
]
