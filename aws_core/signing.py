"""Signing hook contract.

The signature algorithm itself lives outside aws-core. A signer receives the
PreparedRequest for one attempt and either adds its headers in place
(returning None) or returns a signed copy.
"""

from __future__ import annotations

from typing import Callable, Optional

from aws_core.errors import SigningError
from aws_core.models import PreparedRequest


Signer = Callable[[PreparedRequest], Optional[PreparedRequest]]


def sign_request(signer: Signer, request: PreparedRequest) -> PreparedRequest:
    """Run signer over request and return the signed request.

    Raises:
        SigningError: If the signer raises or returns something other than
            a PreparedRequest or None.
    """
    try:
        signed = signer(request)
    except SigningError:
        raise
    except Exception as e:
        raise SigningError(f"signing {request.service} request failed: {e}") from e

    if signed is None:
        return request
    if not isinstance(signed, PreparedRequest):
        raise SigningError(
            f"signer returned {type(signed).__name__}, expected PreparedRequest or None"
        )
    return signed
