"""
spclient.core.auth_data - Persisted session cookies
===================================================

Serializes the ``rtFa`` / ``FedAuth`` pair so a session can be restored
later without repeating the login handshake. Anyone holding the blob can
act as the user until the cookies expire (typically days to weeks) and
there is no way to revoke it, so store it like a password.

The byte format is private to this module.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from spclient.core.errors import BlobDecodeError, SessionCookieError
from spclient.core.models import AuthBlobModel
from spclient.core.result import Outcome
from spclient.core.session import CookiePairs, SessionState

AuthSource = Union[bytes, bytearray, str, "os.PathLike[str]"]


def cookie_string(pairs: Sequence[Tuple[str, str]]) -> str:
    """Format pairs as a ``Cookie`` header value: ``a=1; b=2``."""
    return "; ".join(f"{name}={value}" for name, value in pairs)


class AuthDataCodec:
    """Encode/decode the persisted cookie set."""

    @staticmethod
    def encode_pairs(pairs: Sequence[Tuple[str, str]]) -> bytes:
        blob = AuthBlobModel(cookies=[(str(n), str(v)) for n, v in pairs])
        return blob.model_dump_json().encode("utf-8")

    @classmethod
    def encode(
        cls,
        state: SessionState,
        file: Optional[Union[str, "os.PathLike[str]"]] = None,
    ) -> Union[bytes, Path]:
        """
        Serialize the session's ``rtFa`` and ``FedAuth`` cookies.

        Parameters
        ----------
        state : SessionState
            Authenticated session
        file : str or PathLike, optional
            Write the blob here and return the path instead of the bytes.

        Raises
        ------
        SessionCookieError
            If either cookie is missing from the session.
        """
        if state.missing_cookies():
            raise SessionCookieError(state.base_url, state.cookie_names(),
                                     detail="Cannot export authentication data.")
        data = cls.encode_pairs(state.auth_cookies())
        if file is None:
            return data
        path = Path(file)
        path.write_bytes(data)
        return path

    @staticmethod
    def try_decode(auth: AuthSource) -> Outcome[CookiePairs]:
        if isinstance(auth, (str, os.PathLike)):
            path = Path(auth)
            if not path.is_file():
                return Outcome.failure(BlobDecodeError(f"Authentication data file '{path}' does not exist"))
            raw = path.read_bytes()
        elif isinstance(auth, (bytes, bytearray)):
            raw = bytes(auth)
        else:
            return Outcome.failure(BlobDecodeError(
                f"Authentication data must be bytes or a file path, got {type(auth).__name__}"
            ))

        try:
            blob = AuthBlobModel.model_validate_json(raw)
        except ValidationError as exc:
            return Outcome.failure(BlobDecodeError(
                f"Malformed authentication data ({exc.error_count()} problem(s))"
            ))
        return Outcome.success([(name, value) for name, value in blob.cookies])

    @classmethod
    def decode(cls, auth: AuthSource) -> CookiePairs:
        """
        Read cookie pairs from a blob or a file containing one.

        Raises
        ------
        BlobDecodeError
            Not bytes or a path, missing file, or malformed content.
        """
        return cls.try_decode(auth).unwrap()
