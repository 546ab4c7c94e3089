"""Internal data models for aws-core.

All models use Pydantic v2. An AWSRequest is the immutable-by-convention
description of one call; the Executor derives a fresh PreparedRequest from it
for every attempt, so redirects and credential refreshes never write back into
the caller's request.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aws_core.query import format_query_str


HTTP_VERBS = frozenset({"GET", "HEAD", "POST", "PUT", "DELETE", "PATCH"})

DEFAULT_REGION = "us-east-1"


def _default_region() -> str:
    return os.environ.get("AWS_DEFAULT_REGION", DEFAULT_REGION)


# =============================================================================
# Credentials
# =============================================================================


class Credentials(BaseModel):
    """One set of access keys.

    Frozen: an expired or rotated credential is replaced as a whole, never
    patched field by field, so concurrent readers cannot see a mix of old and
    new keys.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    access_key_id: str = Field(description="Access key ID")
    secret_key: str = Field(repr=False, description="Secret access key")
    token: str | None = Field(default=None, repr=False, description="Session token")
    user_arn: str | None = Field(default=None, description="ARN of the owning user")
    expiration: datetime | None = Field(
        default=None, description="When temporary credentials stop working"
    )

    @property
    def is_expired(self) -> bool:
        if self.expiration is None:
            return False
        expiration = self.expiration
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)
        return expiration <= datetime.now(timezone.utc)

    @property
    def account_number(self) -> str | None:
        """Account number from user_arn, e.g. arn:aws:iam::123456789012:user/bob."""
        if not self.user_arn:
            return None
        fields = self.user_arn.split(":")
        if len(fields) < 5 or not fields[4]:
            return None
        return fields[4]


# =============================================================================
# Request models
# =============================================================================


class AWSConfig(BaseModel):
    """Per-call seed for the request builder: where and as whom to call."""

    model_config = ConfigDict(extra="forbid")

    region: str = Field(default_factory=_default_region, description="Service region")
    credentials: Credentials | None = Field(default=None, description="Credentials to sign with")
    resource: str | None = Field(default=None, description="Resource path, '/' if unset")
    return_stream: bool = Field(default=False, description="Hand back an unread body stream")


def aws_config(
    credentials: Credentials | None = None,
    region: str | None = None,
    **kwargs: Any,
) -> AWSConfig:
    """Build an AWSConfig, taking the region from AWS_DEFAULT_REGION if not given."""
    if region is None:
        region = _default_region()
    return AWSConfig(credentials=credentials, region=region, **kwargs)


class AWSRequest(BaseModel):
    """One pending service call.

    ``content`` is derived from ``query`` unless an explicit ``body`` is set,
    so the encoded body can never go stale relative to the parameters.
    """

    model_config = ConfigDict(extra="forbid")

    verb: str = Field(description="HTTP method (GET, POST, etc.)")
    service: str = Field(description="Service identifier, e.g. 'sdb'")
    region: str = Field(default_factory=_default_region, description="Service region")
    resource: str = Field(default="/", description="URL path")
    url: str = Field(description="Endpoint URL including resource")
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers")
    query: dict[str, str] = Field(default_factory=dict, description="Request parameters")
    body: bytes | str | None = Field(
        default=None, description="Explicit body, overrides the encoded query"
    )
    credentials: Credentials | None = Field(default=None, description="Credentials to sign with")
    return_stream: bool = Field(default=False, description="Hand back an unread body stream")

    @field_validator("verb")
    @classmethod
    def check_verb(cls, value: str) -> str:
        verb = value.upper()
        if verb not in HTTP_VERBS:
            raise ValueError(f"unsupported HTTP verb {value!r}")
        return verb

    @property
    def content(self) -> str | bytes:
        if self.body is not None:
            return self.body
        return format_query_str(self.query)

    @property
    def action(self) -> str | None:
        return self.query.get("Action")


class PreparedRequest(BaseModel):
    """The request as sent on one attempt.

    Built fresh each attempt from an AWSRequest plus the url and credentials
    currently in force. Signers add their headers to ``headers`` in place or
    return a modified copy.
    """

    model_config = ConfigDict(extra="forbid")

    verb: str
    service: str
    region: str
    url: str
    resource: str
    headers: dict[str, str] = Field(default_factory=dict)
    content: bytes = b""
    query: dict[str, str] = Field(default_factory=dict)
    credentials: Credentials | None = None
    return_stream: bool = False
    attempt: int = Field(default=1, description="1-based attempt number")

    @classmethod
    def from_request(
        cls,
        request: AWSRequest,
        *,
        url: str,
        credentials: Credentials | None,
        user_agent: str,
        attempt: int = 1,
    ) -> PreparedRequest:
        parts = urlsplit(url)
        # Keep resource in step with url: a redirect may point at a new path.
        resource = parts.path or "/"
        if url == request.url:
            resource = request.resource

        headers = dict(request.headers)
        headers["User-Agent"] = user_agent
        headers["Host"] = host_header(url)

        content = request.content
        if isinstance(content, str):
            content = content.encode("utf-8")

        return cls(
            verb=request.verb,
            service=request.service,
            region=request.region,
            url=url,
            resource=resource,
            headers=headers,
            content=content,
            query=dict(request.query),
            credentials=credentials,
            return_stream=request.return_stream,
            attempt=attempt,
        )


def host_header(url: str) -> str:
    """Host header value for url: the authority without userinfo.

    IPv6 literals keep their brackets, e.g. ``[::1]:8080``.
    """
    return urlsplit(url).netloc.rpartition("@")[2]


# =============================================================================
# Response models
# =============================================================================


class HttpResponse(BaseModel):
    """A raw response handed back by a Transport."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    status_code: int = Field(description="HTTP status code")
    headers: dict[str, str] = Field(default_factory=dict, description="Response headers")
    content: bytes = Field(default=b"", description="Response body")
    url: str | None = Field(default=None, description="URL the response came from")
    stream: Any = Field(
        default=None, description="Unread streaming response when return_stream was set"
    )

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


# =============================================================================
# Runtime Configuration Models
# =============================================================================


USER_AGENT = "aws-core/0.1.0"


class ClientSettings(BaseModel):
    """Executor settings (loaded from YAML or the environment)."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    region: str = Field(default_factory=_default_region, description="Default region")
    max_attempts: int = Field(default=3, ge=1, description="Sends per call before giving up")
    debug_level: int | None = Field(
        default=None, ge=0, description="Diagnostic verbosity; None uses the process-wide level"
    )
    user_agent: str = Field(default=USER_AGENT, description="User-Agent header value")
    timeout: float = Field(default=30.0, gt=0, description="Transport timeout in seconds")


class BodyKind(str, Enum):
    """How a response body was decoded."""

    XML = "xml"
    JSON = "json"
    RAW = "raw"


class DecodedResponse(BaseModel):
    """A normalized response: the decoded value tagged with how it was decoded."""

    model_config = ConfigDict(extra="forbid")

    kind: BodyKind = Field(description="Decoding applied to the body")
    value: Any = Field(default=None, description="XML tree, JSON value or raw bytes")
    response: HttpResponse = Field(description="The response the value came from")
