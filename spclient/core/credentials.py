"""
spclient.core.credentials - Login identity
==========================================

Username/password pair read from the environment. Only held for the
duration of a login attempt.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

ENV_USERNAME = "SHAREPOINT_USERNAME"
ENV_PASSWORD = "SHAREPOINT_PASS"


@dataclass(frozen=True)
class Credentials:
    """
    Username and password for the federation endpoint.

    The password is excluded from ``repr`` so credentials can be logged
    or shown in tracebacks safely.
    """
    username: str
    password: str = field(repr=False)

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, Path]] = None) -> "Credentials":
        """
        Read credentials from ``SHAREPOINT_USERNAME`` / ``SHAREPOINT_PASS``.

        Parameters
        ----------
        dotenv_path : str or Path, optional
            A ``.env`` file to load first. Variables already present in the
            environment take precedence.

        Raises
        ------
        ValueError
            If either variable is unset or empty.
        """
        if dotenv_path is not None:
            load_dotenv(dotenv_path, override=False)

        username = os.environ.get(ENV_USERNAME, "")
        password = os.environ.get(ENV_PASSWORD, "")
        if not username or not password:
            raise ValueError(
                f"Missing credentials. Set {ENV_USERNAME} and {ENV_PASSWORD} "
                "environment variables, or pass credentials explicitly."
            )
        return cls(username=username, password=password)
