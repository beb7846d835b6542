"""
spclient.core.models - Typed response shapes
============================================

One explicit shape per endpoint the auth lifecycle talks to, each with a
decode step that reports a missing field instead of silently yielding
``None``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple, Union
import xml.etree.ElementTree as ET

from pydantic import BaseModel, ConfigDict, Field


def _strip_ns(tag: str) -> str:
    """Strip XML namespace from a tag name."""
    return tag.split("}", 1)[-1] if "}" in tag else tag


def _first_text(root: ET.Element, local_name: str) -> Optional[str]:
    for node in root.iter():
        if _strip_ns(node.tag) == local_name:
            text = (node.text or "").strip()
            if text:
                return text
    return None


class FederationResponse(BaseModel):
    """
    Decoded body of the federation (extSTS) response.

    A failed login still comes back as 200 with a SOAP fault instead of a
    token, so ``token`` and ``fault`` are both optional here and the
    exchanger decides what a missing token means.
    """
    token: Optional[str] = None
    fault: Optional[str] = None

    @classmethod
    def from_xml(cls, text: Union[str, bytes]) -> "FederationResponse":
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            return cls(fault=f"unparseable response ({exc})")

        token = _first_text(root, "BinarySecurityToken")
        # psf:text carries the AADSTS message, Reason/Text the generic one
        fault = _first_text(root, "text") or _first_text(root, "Text")
        return cls(token=token, fault=None if token else fault)


class ContextInfo(BaseModel):
    """Payload of ``/_api/contextinfo``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    form_digest_value: str = Field(alias="FormDigestValue", min_length=1)
    form_digest_timeout_seconds: Optional[int] = Field(
        default=None, alias="FormDigestTimeoutSeconds"
    )
    web_full_url: Optional[str] = Field(default=None, alias="WebFullUrl")

    @classmethod
    def from_payload(cls, payload: Any) -> "ContextInfo":
        """
        Decode either the flat (``odata=nometadata``/``minimalmetadata``)
        or the verbose (``d.GetContextWebInformation``) payload.

        Raises
        ------
        ValueError
            If the payload is not an object or lacks ``FormDigestValue``.
        """
        if not isinstance(payload, dict):
            raise ValueError("context-info response is not a JSON object")
        data: Dict[str, Any] = payload
        verbose = data.get("d")
        if isinstance(verbose, dict):
            data = verbose.get("GetContextWebInformation", verbose)
        if "FormDigestValue" not in data:
            raise ValueError("FormDigestValue missing from context-info response")
        return cls.model_validate(data)


class AuthBlobModel(BaseModel):
    """Persisted cookie set. Internal to ``AuthDataCodec``."""
    version: Literal[1] = 1
    cookies: List[Tuple[str, str]] = Field(min_length=1)
