"""Transport - sends a PreparedRequest over HTTP.

HttpxTransport never follows redirects itself: 3xx responses come back to the
Executor as TransportError so it can rewrite the url and re-sign.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from aws_core.errors import InvalidParameterError, TransportError
from aws_core.models import HttpResponse, PreparedRequest


logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Sends one request; raises TransportError on failure."""

    def send(self, request: PreparedRequest) -> HttpResponse:
        """Return the response for a 2xx status, raise TransportError otherwise."""
        ...

    def close(self) -> None:
        """Release resources. No-op allowed."""
        ...


def _check_header_values(headers: dict[str, str]) -> None:
    """Raise InvalidParameterError for a header value that is not ASCII.

    Headers go on the wire exactly as signed; a value that would need
    re-encoding is refused rather than altered.
    """
    for key, value in headers.items():
        if not value.isascii():
            raise InvalidParameterError(f"header {key!r} has a non-ASCII value: {value!r}")


class HttpxTransport:
    """Transport backed by httpx.Client.

    Usage:
        with HttpxTransport(timeout=10.0) as transport:
            response = transport.send(prepared)

    Pass ``client`` to share a client (and its connection pool) across
    transports; a client passed in is not closed by ``close``.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
        verify: Any = True,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, verify=verify)
        self._timeout = timeout

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def send(self, request: PreparedRequest) -> HttpResponse:
        """Send request and return the response.

        Raises:
            TransportError: On timeouts, connection failures and non-2xx
                statuses. For HTTP failures ``status``, ``headers`` and
                ``body`` are set from the response.
            InvalidParameterError: If a header value is not ASCII. Nothing is
                sent.
        """
        _check_header_values(request.headers)

        try:
            http_request = self._client.build_request(
                method=request.verb,
                url=request.url,
                headers=request.headers,
                content=request.content or None,
                timeout=self._timeout,
            )
            http_response = self._client.send(
                http_request,
                stream=request.return_stream,
                follow_redirects=False,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"{request.service} request timeout: {e}") from e
        except httpx.ConnectError as e:
            raise TransportError(f"{request.service} connection error: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"{request.service} request error: {e}") from e

        response_headers = dict(http_response.headers.items())

        if not 200 <= http_response.status_code < 300:
            if request.return_stream:
                try:
                    http_response.read()
                except httpx.RequestError as e:
                    raise TransportError(
                        f"{request.service} returned HTTP {http_response.status_code}, "
                        f"error reading body: {e}",
                        status=http_response.status_code,
                        headers=response_headers,
                    ) from e
                finally:
                    http_response.close()
            logger.debug(
                "%s %s returned HTTP %d", request.verb, request.url, http_response.status_code
            )
            raise TransportError(
                f"{request.service} returned HTTP {http_response.status_code}",
                status=http_response.status_code,
                headers=response_headers,
                body=http_response.content,
            )

        if request.return_stream:
            # Body left unread; the caller iterates and closes the stream.
            return HttpResponse(
                status_code=http_response.status_code,
                headers=response_headers,
                url=str(http_response.url),
                stream=http_response,
            )

        return HttpResponse(
            status_code=http_response.status_code,
            headers=response_headers,
            content=http_response.content,
            url=str(http_response.url),
        )
