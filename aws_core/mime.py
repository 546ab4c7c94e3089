"""Simple MIME multipart encoder (e.g. for SES SendRawEmail bodies).

    mime_multipart([
        ("foo.txt", "text/plain", "foo"),
        ("bar.txt", "text/plain", "bar"),
    ])

returns

    MIME-Version: 1.0
    Content-Type: multipart/mixed; boundary="=PRZLn8Nm1I82df0Dtj4ZvJi="


    --=PRZLn8Nm1I82df0Dtj4ZvJi=
    Content-Disposition: attachment; filename=foo.txt
    Content-Type: text/plain
    Content-Transfer-Encoding: binary

    foo
    --=PRZLn8Nm1I82df0Dtj4ZvJi=
    ...
"""

from __future__ import annotations

from typing import Iterable


BOUNDARY = "=PRZLn8Nm1I82df0Dtj4ZvJi="


def mime_multipart(
    parts: Iterable[tuple[str, str, str]],
    header: str = "",
) -> str:
    """Encode (filename, content_type, content) parts as multipart/mixed.

    ``header`` is inserted after the Content-Type line (e.g. "Subject: ...").
    Parts with an empty filename get no Content-Disposition line.
    """
    lines = [
        "MIME-Version: 1.0",
        f'Content-Type: multipart/mixed; boundary="{BOUNDARY}"',
        header,
        "",
        f"--{BOUNDARY}",
    ]

    for filename, content_type, content in parts:
        if filename:
            lines.append(f"Content-Disposition: attachment; filename={filename}")
        lines.extend([
            f"Content-Type: {content_type}",
            "Content-Transfer-Encoding: binary",
            "",
            content,
            f"--{BOUNDARY}",
        ])

    return "\n".join(lines) + "\n"
