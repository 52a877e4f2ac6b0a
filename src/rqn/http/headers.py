"""Colon-delimited header block shared by requests and responses."""

from __future__ import annotations

from typing import Mapping

CRLF = "\r\n"

HeaderMap = dict[str, str]


def serialize_headers(headers: Mapping[str, str]) -> str:
    """Render ``{"Host": "a"}`` as ``"Host: a"`` lines joined by CRLF, in insertion order."""
    return CRLF.join(f"{key}: {value}" for key, value in headers.items())


def parse_headers(block: str) -> HeaderMap:
    """
    Parse a header block into a dict.

    Each line is split at the first colon only, so values such as
    ``12:30:00`` or ``http://host/x`` survive. Exactly one leading space is
    dropped from the value; the name is kept as sent. A later header with
    the same name overwrites an earlier one.
    """
    headers: HeaderMap = {}
    for line in block.split(CRLF):
        if line == "":
            continue
        key, sep, value = line.partition(":")
        if not sep:
            # Not a header line; obsolete folding is not supported.
            continue
        if value.startswith(" "):
            value = value[1:]
        headers[key] = value
    return headers


def get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive lookup. The last matching name wins."""
    wanted = name.lower()
    found = None
    for key, value in headers.items():
        if key.lower() == wanted:
            found = value
    return found
