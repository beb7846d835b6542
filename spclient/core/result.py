"""
spclient.core.result - Explicit success/failure outcomes
========================================================

Fallible auth steps expose a ``try_*`` variant returning an ``Outcome`` so
callers can branch on ``outcome.ok`` instead of catching exceptions. The
plain variants simply ``unwrap()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from spclient.core.errors import SharePointError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of one fallible operation.

    Exactly one of ``value`` / ``error`` is meaningful: ``error`` is set on
    failure, otherwise ``value`` holds the result.

    Examples
    --------
    >>> outcome = exchanger.try_exchange(creds)
    >>> if not outcome.ok:
    ...     log.warning("login failed: %s", outcome.error)
    """
    value: Optional[T] = None
    error: Optional[SharePointError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SharePointError) -> "Outcome[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
