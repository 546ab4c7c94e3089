"""Credential resolution and the shared credentials cache."""

from __future__ import annotations

import logging
import os
from threading import Lock
from typing import Callable

from aws_core.errors import CredentialsError
from aws_core.models import Credentials


logger = logging.getLogger(__name__)

CredentialResolver = Callable[[], Credentials]


def env_credentials() -> Credentials:
    """Read credentials from the standard AWS_* environment variables.

    Raises:
        CredentialsError: If the access key ID or secret key is not set.
    """
    access_key_id = os.environ.get("AWS_ACCESS_KEY_ID")
    secret_key = os.environ.get("AWS_SECRET_ACCESS_KEY")
    if not access_key_id or not secret_key:
        raise CredentialsError(
            "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set"
        )
    return Credentials(
        access_key_id=access_key_id,
        secret_key=secret_key,
        token=os.environ.get("AWS_SESSION_TOKEN") or None,
        user_arn=os.environ.get("AWS_USER_ARN") or None,
    )


class CredentialProvider:
    """Caches one Credentials handle shared by concurrent calls.

    Usage:
        provider = CredentialProvider()
        creds = provider.current()
        ...  # service says the token expired
        creds = provider.refresh(creds)

    The cached handle is only ever swapped for a whole new one. ``refresh``
    resolves again only when the cache still holds the stale handle, so
    several calls hitting the same expiry trigger one resolution.
    """

    def __init__(self, resolver: CredentialResolver = env_credentials) -> None:
        self._resolver = resolver
        self._credentials: Credentials | None = None
        self._lock = Lock()

    def current(self) -> Credentials:
        """Return the cached credentials, resolving them on first use or expiry."""
        with self._lock:
            if self._credentials is None or self._credentials.is_expired:
                self._credentials = self._resolve()
            return self._credentials

    def refresh(self, stale: Credentials | None = None) -> Credentials:
        """Replace ``stale`` with freshly resolved credentials."""
        with self._lock:
            if self._credentials is None or self._credentials is stale:
                self._credentials = self._resolve()
            return self._credentials

    def _resolve(self) -> Credentials:
        credentials = self._resolver()
        if not isinstance(credentials, Credentials):
            raise CredentialsError(
                f"credential resolver returned {type(credentials).__name__}, expected Credentials"
            )
        logger.debug("resolved credentials for access key %s", credentials.access_key_id)
        return credentials
