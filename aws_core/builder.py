"""Request Builder - turns (service, version, parameters) into an AWSRequest.

e.g.

    post_request(aws_config(region="ap-southeast-2"), "sdb", "2009-04-15",
                 {"Action": "ListDomains"})

    AWSRequest(
        verb="POST",
        service="sdb",
        region="ap-southeast-2",
        resource="/",
        url="https://sdb.ap-southeast-2.amazonaws.com/",
        headers={"Content-Type": "application/x-www-form-urlencoded; charset=utf-8"},
        query={"Action": "ListDomains", "Version": "2009-04-15"},
    )

with content "Action=ListDomains&Version=2009-04-15".
"""

from __future__ import annotations

from typing import Mapping

from aws_core.endpoints import EndpointResolver, aws_endpoint
from aws_core.models import AWSConfig, AWSRequest
from aws_core.query import check_parameters, format_query_str


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


__all__ = ["FORM_CONTENT_TYPE", "format_query_str", "post_request"]


def post_request(
    config: AWSConfig,
    service: str,
    version: str,
    query: Mapping[str, str],
    endpoint_resolver: EndpointResolver = aws_endpoint,
) -> AWSRequest:
    """Build a form-encoded POST request for a query-protocol service.

    The caller's mapping is copied, never modified. A non-empty ``version``
    overwrites any ``Version`` parameter already present.

    Raises:
        InvalidParameterError: If a parameter key or value is not a string.
    """
    check_parameters(query)

    resource = config.resource or "/"
    url = endpoint_resolver(service, config.region) + resource

    parameters = dict(query)
    if version != "":
        parameters["Version"] = version

    return AWSRequest(
        verb="POST",
        service=service,
        region=config.region,
        resource=resource,
        url=url,
        headers={"Content-Type": FORM_CONTENT_TYPE},
        query=parameters,
        credentials=config.credentials,
        return_stream=config.return_stream,
    )
