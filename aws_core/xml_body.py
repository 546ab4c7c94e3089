"""XML response bodies as plain Python trees.

Query-protocol services (SimpleDB, SQS, IAM, EC2, ...) answer in XML. The
decoder and the error translator both work on the dict form produced here,
so XML and JSON services look alike to callers.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any


def xml_to_dict(
    xml_bytes: bytes,
    force_list: set[str] | None = None,
) -> dict[str, Any]:
    """Parse XML bytes into a dict keyed by the root tag.

    ``<ListDomainsResponse xmlns="http://sdb.amazonaws.com/doc/2009-04-15/">``
    becomes the key ``ListDomainsResponse``: namespace URIs are dropped.

    Args:
        xml_bytes: Raw XML body.
        force_list: Tags that are always lists, even with a single element
            (e.g. ``{"DomainName"}`` so one domain still comes back as a list).

    Raises:
        ET.ParseError: If *xml_bytes* is not well-formed.
    """
    root = ET.fromstring(xml_bytes)
    return {_local_name(root.tag): _convert(root, force_list or set())}


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.rpartition("}")[2]
    return tag


def _convert(element: ET.Element, force_list: set[str]) -> dict[str, Any] | str | None:
    """Convert one element.

    Attributes map to ``@name`` keys, children are grouped by tag (lists when
    repeated or forced), text-only leaves become strings and empty elements
    None. Text next to attributes or children goes under ``#text``.
    """
    node: dict[str, Any] = {
        f"@{name}": value
        for name, value in element.attrib.items()
        if not name.startswith(("xmlns", "{"))
    }

    grouped: dict[str, list[Any]] = {}
    for child in element:
        grouped.setdefault(_local_name(child.tag), []).append(_convert(child, force_list))
    for tag, items in grouped.items():
        node[tag] = items if (len(items) > 1 or tag in force_list) else items[0]

    text = (element.text or "").strip()
    if not text:
        return node or None
    if not node:
        return text
    node["#text"] = text
    return node
