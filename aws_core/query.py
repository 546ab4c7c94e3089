"""Query-string encoding for form-encoded request bodies."""

from __future__ import annotations

from typing import Mapping
from urllib.parse import quote

from aws_core.errors import InvalidParameterError


def format_query_str(query: Mapping[str, str]) -> str:
    """Encode parameters as a query string with keys in sorted order.

    Keys and values are percent-encoded per RFC 3986 (only ``A-Z a-z 0-9 - _ . ~``
    left as is), the encoding signature version 2 and 4 expect, so equal
    mappings always encode to identical strings.
    """
    check_parameters(query)
    return "&".join(
        f"{quote(key, safe='-_.~')}={quote(query[key], safe='-_.~')}"
        for key in sorted(query)
    )


def check_parameters(query: Mapping[str, str]) -> None:
    """Raise InvalidParameterError unless query maps strings to strings."""
    if not isinstance(query, Mapping):
        raise InvalidParameterError(
            f"parameters must be a mapping, got {type(query).__name__}"
        )
    for key, value in query.items():
        if not isinstance(key, str):
            raise InvalidParameterError(
                f"parameter name must be a string, got {type(key).__name__}: {key!r}"
            )
        if not isinstance(value, str):
            raise InvalidParameterError(
                f"parameter {key!r} must be a string, got {type(value).__name__}"
            )
