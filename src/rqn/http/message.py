"""Request message building.

Turns ``(method, url, options)`` into the exact bytes written to the socket::

    POST /form?x=1 HTTP/1.1\r\n
    Host: example.com\r\n
    Content-Type: application/x-www-form-urlencoded\r\n
    Content-Length: 7\r\n
    \r\n
    foo=bar

Body sources are mutually exclusive; the first one present wins:
``body`` (text/plain), then ``form`` (urlencoded), then ``json``.
Caller ``headers`` are merged last and override anything computed here,
including ``Host`` and ``Content-Length``.

``Host`` never carries the port. Servers that route on ``host:port`` need
an explicit ``Host`` header from the caller.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote, urlsplit

from .headers import CRLF, HeaderMap, serialize_headers

HTTP_VERSION = "1.1"

# Characters left alone by JavaScript's encodeURIComponent.
_UNRESERVED = "-_.!~*'()"

# Reserved and unreserved characters kept as-is in a URL path; "%" keeps
# existing escapes intact.
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = _PATH_SAFE + "?"


@dataclass(frozen=True, slots=True)
class RequestOptions:
    headers: Mapping[str, str] | None = None
    body: str | None = None
    qs: Mapping[str, Any] | None = None
    form: Mapping[str, Any] | None = None
    json: Any = None


@dataclass(frozen=True, slots=True)
class ParsedURL:
    scheme: str
    hostname: str
    port: int | None
    path: str
    query: str

    @property
    def search(self) -> str:
        """The query string with its leading ``?``, or ``""``."""
        return f"?{self.query}" if self.query else ""

    @property
    def target(self) -> str:
        return self.path + self.search

    @property
    def host_header(self) -> str:
        """Hostname for the Host header; IPv6 literals keep their brackets."""
        return f"[{self.hostname}]" if ":" in self.hostname else self.hostname


def parse_url(url: str) -> ParsedURL:
    """Split an absolute URL, percent-encoding spaces and non-ASCII text in
    the path and query. Raises ValueError for a bad port."""
    parts = urlsplit(url)
    return ParsedURL(
        scheme=parts.scheme.lower(),
        hostname=parts.hostname or "",
        port=parts.port,
        path=quote(parts.path, safe=_PATH_SAFE) or "/",
        query=quote(parts.query, safe=_QUERY_SAFE),
    )


def _stringify(value: Any) -> str:
    match value:
        case None:
            return "null"
        case bool():
            return "true" if value else "false"
        case list() | tuple():
            return ",".join("" if v is None else _stringify(v) for v in value)
        case dict():
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        case _:
            return str(value)


def encode_component(value: Any) -> str:
    return quote(_stringify(value), safe=_UNRESERVED)


def encode_params(params: Mapping[str, Any]) -> str:
    """``{"a": "b c", "n": 1}`` -> ``"a=b%20c&n=1"``."""
    return "&".join(
        f"{encode_component(key)}={encode_component(value)}" for key, value in params.items()
    )


def _body_and_headers(options: RequestOptions) -> tuple[str, HeaderMap]:
    if options.body is not None:
        return options.body, {"Content-Type": "text/plain"}
    if options.form is not None:
        return encode_params(options.form), {"Content-Type": "application/x-www-form-urlencoded"}
    if options.json is not None:
        body = json.dumps(options.json, separators=(",", ":"), ensure_ascii=False)
        return body, {"Content-Type": "application/json"}
    return "", {}


def build_request_message(method: str, url: ParsedURL, options: RequestOptions | None = None) -> bytes:
    options = options or RequestOptions()

    search = url.search
    if options.qs is not None:
        search = "?" + encode_params(options.qs)

    headers: HeaderMap = {"Host": url.host_header}
    body, body_headers = _body_and_headers(options)
    if body_headers:
        headers.update(body_headers)
        headers["Content-Length"] = str(len(body.encode("utf-8")))
    if options.headers:
        headers.update(options.headers)

    start_line = f"{method} {url.path}{search} HTTP/{HTTP_VERSION}"
    return CRLF.join([start_line, serialize_headers(headers), "", body]).encode("utf-8")
