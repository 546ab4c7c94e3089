"""Pytest configuration and fixtures for aws-core tests.

This file provides:
- make_http_response: HttpResponse factory with sensible defaults
- Credential fixtures and a recording signer
- An sdb ListDomains request as the standard request under test
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from aws_core.builder import post_request
from aws_core.models import AWSConfig, AWSRequest, Credentials, HttpResponse, PreparedRequest


def _make_http_response(
    status_code: int = 200,
    content: bytes = b"",
    content_type: str | None = None,
    headers: dict[str, str] | None = None,
) -> HttpResponse:
    """Create an HttpResponse for testing.

    Prefer this over constructing HttpResponse directly - it documents which
    fields are typically varied in tests.
    """
    all_headers = dict(headers or {})
    if content_type is not None:
        all_headers["Content-Type"] = content_type
    return HttpResponse(status_code=status_code, headers=all_headers, content=content)


@pytest.fixture
def make_http_response() -> Callable[..., HttpResponse]:
    return _make_http_response


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        access_key_id="AKIDEXAMPLE",
        secret_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
        user_arn="arn:aws:iam::123456789012:user/test",
    )


@pytest.fixture
def fresh_credentials() -> Credentials:
    return Credentials(access_key_id="AKIDFRESH", secret_key="fresh-secret", token="fresh-token")


@pytest.fixture
def sdb_request(credentials: Credentials) -> AWSRequest:
    config = AWSConfig(region="ap-southeast-2", credentials=credentials)
    return post_request(config, "sdb", "2009-04-15", {"Action": "ListDomains"})


class RecordingSigner:
    """Signer that adds a fake Authorization header and records what it signed."""

    def __init__(self) -> None:
        self.signed: list[PreparedRequest] = []

    def __call__(self, request: PreparedRequest) -> None:
        access_key = request.credentials.access_key_id if request.credentials else "anonymous"
        request.headers["Authorization"] = f"TEST Credential={access_key}"
        self.signed.append(request)


@pytest.fixture
def signer() -> RecordingSigner:
    return RecordingSigner()


def sent_requests(transport: Any) -> list[PreparedRequest]:
    """Requests passed to a MagicMock transport's send(), in order."""
    return [call.args[0] for call in transport.send.call_args_list]


@pytest.fixture
def sent() -> Callable[[Any], list[PreparedRequest]]:
    return sent_requests
