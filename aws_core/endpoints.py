"""Default endpoint resolution: (service, region) -> base URL."""

from __future__ import annotations

from typing import Callable


EndpointResolver = Callable[[str, str], str]

# Services with a single endpoint regardless of region.
GLOBAL_SERVICES = frozenset({"iam", "route53", "cloudfront", "importexport"})


def aws_endpoint(service: str, region: str) -> str:
    """Base URL (scheme + host, no trailing slash) for service in region.

    >>> aws_endpoint("sdb", "ap-southeast-2")
    'https://sdb.ap-southeast-2.amazonaws.com'
    """
    if service in GLOBAL_SERVICES:
        return f"https://{service}.amazonaws.com"

    suffix = "amazonaws.com.cn" if region.startswith("cn-") else "amazonaws.com"
    return f"https://{service}.{region}.{suffix}"
