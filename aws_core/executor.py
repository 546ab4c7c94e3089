"""Executor - signs, sends and retries AWSRequests, then decodes the response.

One call runs up to ``max_attempts`` (default 3) attempts:

    prepare -> sign -> send -> success            -> decode, return
                            -> redirect (301/302/307 + Location)
                                                  -> retry at the new url
                            -> ExpiredToken       -> retry with fresh credentials
                            -> anything else      -> retry until attempts run out

Each attempt gets a fresh PreparedRequest derived from the caller's AWSRequest
and the overrides accumulated so far (redirect url, current credentials). The
AWSRequest itself is never modified. When attempts run out the last
classified error is raised. Signing and decoding errors are raised at once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Union
from urllib.parse import urljoin

from aws_core.config_loader import get_debug_level
from aws_core.credentials import CredentialProvider
from aws_core.decoder import decode_response
from aws_core.errors import (
    EXPIRED_TOKEN_CODES,
    AWSCoreError,
    TransportError,
    translate_error,
)
from aws_core.models import (
    AWSRequest,
    ClientSettings,
    Credentials,
    DecodedResponse,
    HttpResponse,
    PreparedRequest,
)
from aws_core.signing import Signer, sign_request
from aws_core.transport import HttpxTransport, Transport


logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 307})


# =============================================================================
# Attempt outcomes
# =============================================================================


@dataclass(frozen=True)
class Succeeded:
    response: HttpResponse


@dataclass(frozen=True)
class Redirected:
    location: str
    error: AWSCoreError


@dataclass(frozen=True)
class CredentialsExpired:
    error: AWSCoreError


@dataclass(frozen=True)
class Failed:
    error: AWSCoreError


Outcome = Union[Succeeded, Redirected, CredentialsExpired, Failed]


def classify_error(
    error: TransportError,
    translator: Callable[[TransportError], AWSCoreError] = translate_error,
) -> Outcome:
    """Decide what a failed send means for the retry loop.

    A redirect needs only the status and Location header; the body is not
    inspected. Everything else is translated first so expiry can be
    recognized by its error code.
    """
    location = error.header("Location")
    if error.status in REDIRECT_STATUSES and location:
        return Redirected(location=location, error=translator(error))

    translated = translator(error)
    if translated.code in EXPIRED_TOKEN_CODES:
        return CredentialsExpired(error=translated)
    return Failed(error=translated)


def describe_request(request: AWSRequest | PreparedRequest) -> str:
    """One-line summary: service, action and any *Name parameters.

    e.g. ``sdb.PutAttributes / my-domain item-1``
    """
    action = request.query.get("Action", request.verb)
    names = [request.query[key] for key in sorted(request.query) if key.endswith("Name")]
    return " ".join([f"{request.service}.{action}", request.resource, *names])


# =============================================================================
# Executor
# =============================================================================


class Executor:
    """Runs AWSRequests through the sign/send/retry loop.

    Usage:
        with Executor(signer) as executor:
            result = executor.execute(post_request(config, "sdb", "2009-04-15",
                                                   {"Action": "ListDomains"}))

    ``transport`` defaults to an HttpxTransport owned (and closed) by the
    executor. ``credentials`` is the cache consulted when a request carries
    no credentials or its credentials have expired; share one provider
    between executors to share the cache.
    """

    def __init__(
        self,
        signer: Signer,
        transport: Transport | None = None,
        credentials: CredentialProvider | None = None,
        settings: ClientSettings | None = None,
        debug_level: int | None = None,
        translator: Callable[[TransportError], AWSCoreError] = translate_error,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._signer = signer
        self._credentials = credentials or CredentialProvider()
        self._translator = translator
        self._debug_level = debug_level if debug_level is not None else self._settings.debug_level

        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(timeout=self._settings.timeout)

    def __enter__(self) -> "Executor":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport if this executor created it."""
        if self._owns_transport:
            self._transport.close()

    @property
    def max_attempts(self) -> int:
        return self._settings.max_attempts

    @property
    def debug_level(self) -> int:
        """Explicit level if one was given, else the process-wide level (read per call)."""
        if self._debug_level is not None:
            return self._debug_level
        return get_debug_level()

    def execute(self, request: AWSRequest) -> DecodedResponse:
        """Send request, retrying redirects, expired credentials and failures.

        Returns:
            The decoded response of the first successful attempt.

        Raises:
            SigningError: If the signer fails (no retry).
            MalformedResponseError: If the successful response does not decode.
            CredentialsError: If credentials are needed but cannot be resolved.
            AWSCoreError: The last classified error (ServiceError or
                TransportError) once all attempts have failed.
        """
        debug_level = self.debug_level

        url = request.url
        credentials = request.credentials
        credentials_expired = False
        last_error: AWSCoreError | None = None

        for attempt in range(1, self.max_attempts + 1):
            credentials = self._ensure_credentials(credentials, credentials_expired)
            credentials_expired = False

            prepared = PreparedRequest.from_request(
                request,
                url=url,
                credentials=credentials,
                user_agent=self._settings.user_agent,
                attempt=attempt,
            )
            signed = sign_request(self._signer, prepared)

            if debug_level > 0:
                logger.info("%s", describe_request(signed))

            outcome = self._send(signed)

            if isinstance(outcome, Succeeded):
                return decode_response(outcome.response, request)

            last_error = outcome.error
            if attempt == self.max_attempts:
                break

            if isinstance(outcome, Redirected):
                logger.debug("attempt %d: redirected to %s", attempt, outcome.location)
                url = urljoin(url, outcome.location)
            elif isinstance(outcome, CredentialsExpired):
                logger.debug("attempt %d: %s, refreshing credentials", attempt, outcome.error.code)
                credentials_expired = True
            else:
                logger.debug(
                    "attempt %d/%d failed: %s", attempt, self.max_attempts, outcome.error
                )

        if last_error is None:
            raise AWSCoreError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if debug_level > 0:
            logger.warning(
                "%s failed after %d attempts: %s",
                describe_request(request),
                self.max_attempts,
                type(last_error).__name__,
            )
        raise last_error

    def _ensure_credentials(
        self,
        credentials: Credentials | None,
        expired: bool,
    ) -> Credentials:
        if expired:
            return self._credentials.refresh(credentials)
        if credentials is None or credentials.is_expired:
            return self._credentials.current()
        return credentials

    def _send(self, request: PreparedRequest) -> Outcome:
        try:
            response = self._transport.send(request)
        except TransportError as e:
            return classify_error(e, self._translator)
        return Succeeded(response=response)


def do_request(
    request: AWSRequest,
    signer: Signer,
    transport: Transport | None = None,
    credentials: CredentialProvider | None = None,
    settings: ClientSettings | None = None,
) -> DecodedResponse:
    """Execute one request with a short-lived Executor."""
    with Executor(
        signer,
        transport=transport,
        credentials=credentials,
        settings=settings,
    ) as executor:
        return executor.execute(request)
