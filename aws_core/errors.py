"""Error taxonomy for aws-core.

Every error raised to callers derives from AWSCoreError and carries a
``code`` so callers can branch on the kind of failure without isinstance
chains. Redirects and expired tokens are handled inside the Executor and only
reach the caller when they are the last failure of an exhausted retry budget.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any
from xml.etree.ElementTree import ParseError

from aws_core.xml_body import xml_to_dict


# Error codes services use to say the session token has run out. RequestExpired
# (stale request timestamp, i.e. clock skew) is not one of them: fresh
# credentials would not fix it.
EXPIRED_TOKEN_CODES = frozenset({"ExpiredToken", "ExpiredTokenException"})


class AWSCoreError(Exception):
    """Base class for aws-core errors."""

    code = "AWSCoreError"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidParameterError(AWSCoreError):
    """Raised when request builder input is malformed."""

    code = "InvalidParameter"


class SigningError(AWSCoreError):
    """Raised when the signer fails. Never retried."""

    code = "SigningFailure"


class CredentialsError(AWSCoreError):
    """Raised when no credentials can be resolved."""

    code = "CredentialsError"


class MalformedResponseError(AWSCoreError):
    """Raised when a successful response body cannot be decoded."""

    code = "MalformedResponse"


class TransportError(AWSCoreError):
    """Raised by a Transport for connection failures and non-2xx responses.

    ``status`` and ``headers`` are None when no HTTP response was received.
    """

    code = "TransportError"

    def __init__(
        self,
        message: str,
        status: int | None = None,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
    ) -> None:
        super().__init__(message)
        self.status = status
        self.headers = headers
        self.body = body

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup, None if absent."""
        if not self.headers:
            return None
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class ServiceError(AWSCoreError):
    """A structured error returned by the service."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status = status
        self.request_id = request_id

    def __str__(self) -> str:
        status = f" (HTTP {self.status})" if self.status is not None else ""
        return f"{self.code}: {self.message}{status}"


def translate_error(error: TransportError) -> AWSCoreError:
    """Turn a raw transport failure into a structured service error.

    Errors without an HTTP status (connection refused, timeout) are returned
    as-is. Otherwise the error body is searched for an error code and message,
    XML first, then JSON; when neither yields a code the HTTP reason phrase
    stands in for it.
    """
    if error.status is None:
        return error

    fields = _error_fields(error.body)
    code = fields.get("code") or _reason_phrase(error.status)
    message = fields.get("message") or error.message
    request_id = fields.get("request_id") or error.header("x-amzn-RequestId") or error.header(
        "x-amz-request-id"
    )
    return ServiceError(code, message, status=error.status, request_id=request_id)


def _reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase.replace(" ", "")
    except ValueError:
        return f"HTTP{status}"


def _error_fields(body: bytes) -> dict[str, str]:
    if not body:
        return {}
    stripped = body.lstrip()
    if stripped.startswith(b"<"):
        try:
            return _xml_error_fields(xml_to_dict(stripped))
        except ParseError:
            return {}
    if stripped.startswith(b"{"):
        try:
            document = json.loads(stripped)
        except ValueError:
            return {}
        if isinstance(document, dict):
            return _json_error_fields(document)
    return {}


def _xml_error_fields(tree: dict[str, Any]) -> dict[str, str]:
    """Find <Error> in the common layouts.

    <ErrorResponse><Error>..</Error><RequestId/></ErrorResponse> (query APIs),
    <Response><Errors><Error>..</Error></Errors></Response> (EC2),
    <Error>..</Error> (S3).
    """
    root_tag, root = next(iter(tree.items()))
    if not isinstance(root, dict):
        return {}

    request_id = root.get("RequestId") or root.get("RequestID")
    if root_tag == "Error":
        error = root
    elif isinstance(root.get("Errors"), dict):
        error = root["Errors"].get("Error")
    else:
        error = root.get("Error")
    if isinstance(error, list):
        error = error[0] if error else None
    if not isinstance(error, dict):
        return {}

    fields = {
        "code": error.get("Code"),
        "message": error.get("Message"),
        "request_id": request_id or error.get("RequestId"),
    }
    return {k: v for k, v in fields.items() if isinstance(v, str) and v}


def _json_error_fields(document: dict[str, Any]) -> dict[str, str]:
    code = document.get("__type") or document.get("code") or document.get("Code")
    if isinstance(code, str) and "#" in code:
        # "com.amazon.coral.service#ExpiredTokenException"
        code = code.rsplit("#", 1)[1]
    message = document.get("message") or document.get("Message")
    fields = {"code": code, "message": message}
    return {k: v for k, v in fields.items() if isinstance(v, str) and v}
