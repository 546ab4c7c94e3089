"""Response Decoder - content-type dispatch for successful responses.

    */xml              -> XML tree (xml_to_dict)
    */x-amz-json-1.0   -> JSON value, as parsed
    *json              -> JSON value, unwrapped from {Action}Response/{Action}Result
                          when the service follows that convention
    anything else      -> raw bytes

Branch order matters: application/x-amz-json-1.0 does not end in "json", but
it must never be unwrapped, so it is checked first.
"""

from __future__ import annotations

import json
from typing import Any
from xml.etree.ElementTree import ParseError

from aws_core.errors import MalformedResponseError
from aws_core.models import AWSRequest, BodyKind, DecodedResponse, HttpResponse, PreparedRequest
from aws_core.xml_body import xml_to_dict


def mimetype(response: HttpResponse) -> str:
    """Content-Type without parameters, e.g. 'text/xml' for 'text/xml; charset=UTF-8'."""
    content_type = response.header("Content-Type") or ""
    return content_type.split(";", 1)[0].strip()


def decode_response(
    response: HttpResponse | DecodedResponse,
    request: AWSRequest | PreparedRequest | None = None,
) -> DecodedResponse:
    """Decode the response body according to its content-type.

    Decoding is applied once: a DecodedResponse is returned unchanged. An
    empty body is never decoded, whatever the content-type says.

    Args:
        response: The response to decode.
        request: The request that produced it; its ``Action`` parameter
            drives the JSON unwrap.

    Raises:
        MalformedResponseError: If an XML or JSON body does not parse.
    """
    if isinstance(response, DecodedResponse):
        return response

    if not response.content:
        return DecodedResponse(kind=BodyKind.RAW, value=response.content, response=response)

    mime = mimetype(response)

    if mime.endswith("/xml"):
        try:
            tree = xml_to_dict(response.content)
        except ParseError as e:
            raise MalformedResponseError(f"invalid XML in {mime} response: {e}") from e
        return DecodedResponse(kind=BodyKind.XML, value=tree, response=response)

    if mime.endswith("/x-amz-json-1.0"):
        return DecodedResponse(kind=BodyKind.JSON, value=_parse_json(response), response=response)

    if mime.endswith("json"):
        value = _parse_json(response)
        action = request.query.get("Action") if request is not None else None
        if action:
            value = _unwrap_action_result(value, action)
        return DecodedResponse(kind=BodyKind.JSON, value=value, response=response)

    return DecodedResponse(kind=BodyKind.RAW, value=response.content, response=response)


def _parse_json(response: HttpResponse) -> Any:
    try:
        return json.loads(response.content)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise MalformedResponseError(f"invalid JSON response: {e}") from e


def _unwrap_action_result(value: Any, action: str) -> Any:
    """{"<Action>Response": {"<Action>Result": X}} -> X, anything else as is."""
    if not isinstance(value, dict):
        return value
    wrapper = value.get(f"{action}Response")
    if not isinstance(wrapper, dict) or f"{action}Result" not in wrapper:
        return value
    return wrapper[f"{action}Result"]
