"""
spclient.core - Authentication and session lifecycle
====================================================

- Credentials: username/password from the environment
- TokenExchanger: credentials -> SAML security token
- SessionEstablisher: security token -> rtFa/FedAuth cookies
- SessionState / SharePointSession: cookie jar and request routing
- DigestProvider: X-RequestDigest for writes
- AuthDataCodec: save/restore the session cookies
- SharePointClient: everything above behind one object

"""

from spclient.core.errors import (
    SharePointError,
    AuthRequestError,
    TokenNotFoundError,
    SessionCookieError,
    DigestError,
    BlobDecodeError,
    SharePointUpstreamError,
)
from spclient.core.result import Outcome
from spclient.core.credentials import Credentials
from spclient.core.session import (
    REQUIRED_COOKIES,
    SessionState,
    SharePointConfig,
    SharePointSession,
)
from spclient.core.digest import DigestProvider
from spclient.core.token import TokenExchanger, prepare_security_token_payload
from spclient.core.signin import SessionEstablisher, validate_cookies
from spclient.core.auth_data import AuthDataCodec, cookie_string
from spclient.core.connection import SharePointClient

__all__ = [
    "SharePointError",
    "AuthRequestError",
    "TokenNotFoundError",
    "SessionCookieError",
    "DigestError",
    "BlobDecodeError",
    "SharePointUpstreamError",
    "Outcome",
    "Credentials",
    "REQUIRED_COOKIES",
    "SessionState",
    "SharePointConfig",
    "SharePointSession",
    "DigestProvider",
    "TokenExchanger",
    "prepare_security_token_payload",
    "SessionEstablisher",
    "validate_cookies",
    "AuthDataCodec",
    "cookie_string",
    "SharePointClient",
]
