"""Incremental HTTP/1.1 response parser.

The parser is a set of immutable state values plus one transition function::

    state = AwaitingInitialLine()
    for data in chunks:
        state, response = feed(state, data)
        if response is not None:
            break

``data`` may be cut anywhere: in the middle of the status line, a header,
a chunk-size line, a multi-byte character or the CRLF that ends an HTTP
chunk. The framing strategy is picked once, right after the headers:

- ``Content-Length`` present -> read exactly that many bytes
- ``Transfer-Encoding: chunked`` -> decode chunks until the zero-size chunk
- neither -> the response has no body and is complete immediately

A ``Response`` is returned exactly once, on the transition into ``Complete``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import TypeAlias

from ..errors import MalformedResponse
from .headers import CRLF, HeaderMap, get_header, parse_headers

_HEAD_END = b"\r\n\r\n"
_LINE_END = b"\r\n"

# Limits on data buffered while waiting for a line terminator.
MAX_HEAD_BYTES = 64 * 1024
MAX_CHUNK_LINE_BYTES = 4 * 1024

# The first three-digit token is the status code; the rest of the line is the message.
_STATUS_LINE = re.compile(r"\b(\d{3})\b(?:[ \t]+(.*))?")
_CHUNK_SIZE = re.compile(rb"[0-9A-Fa-f]+")


@dataclass(frozen=True, slots=True)
class Response:
    status_code: int
    headers: HeaderMap
    body: str
    status_message: str = ""
    content: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return get_header(self.headers, name)


@dataclass(frozen=True, slots=True)
class ResponseHead:
    status_code: int
    status_message: str
    headers: HeaderMap


@dataclass(frozen=True, slots=True)
class AwaitingInitialLine:
    buffer: bytes = b""


@dataclass(frozen=True, slots=True)
class FramingByContentLength:
    head: ResponseHead
    remaining: int
    body: tuple[bytes, ...] = ()


@dataclass(frozen=True, slots=True)
class FramingByChunked:
    head: ResponseHead
    remaining_chunk_bytes: int = 0
    body: tuple[bytes, ...] = ()
    # Bytes waiting for a line terminator (chunk-size line or post-chunk CRLF).
    pending: bytes = b""
    expect_crlf: bool = False


@dataclass(frozen=True, slots=True)
class Complete:
    response: Response = field(repr=False)


ParserState: TypeAlias = AwaitingInitialLine | FramingByContentLength | FramingByChunked | Complete


def parse_status_line(line: str) -> tuple[int, str]:
    match = _STATUS_LINE.search(line.strip())
    if match is None:
        raise MalformedResponse(f"invalid status line: {line!r}")
    return int(match.group(1)), match.group(2) or ""


def parse_head(block: bytes) -> ResponseHead:
    """Parse the status line and header block (without the final CRLFCRLF)."""
    text = block.decode("iso-8859-1")
    status_line, _, header_block = text.partition(CRLF)
    status_code, status_message = parse_status_line(status_line)
    return ResponseHead(status_code, status_message, parse_headers(header_block))


def parse_chunk_size(line: bytes) -> int:
    token = line.split(b";", 1)[0].strip()
    if not _CHUNK_SIZE.fullmatch(token):
        raise MalformedResponse(f"invalid chunk size: {line!r}")
    return int(token, 16)


def feed(state: ParserState, data: bytes) -> tuple[ParserState, Response | None]:
    """Advance ``state`` with ``data``. Returns the new state and, once, the Response."""
    match state:
        case AwaitingInitialLine(buffer=buffer):
            return _feed_initial(buffer + data)
        case FramingByContentLength():
            return _feed_content_length(state, data)
        case FramingByChunked():
            return _feed_chunked(state, data)
        case Complete():
            return state, None
        case _:
            raise TypeError(f"unknown parser state: {state!r}")


def _complete(head: ResponseHead, body: tuple[bytes, ...]) -> tuple[Complete, Response]:
    content = b"".join(body)
    response = Response(
        status_code=head.status_code,
        headers=head.headers,
        body=content.decode("utf-8", errors="replace"),
        status_message=head.status_message,
        content=content,
    )
    return Complete(response), response


def _feed_initial(buffer: bytes) -> tuple[ParserState, Response | None]:
    head_end = buffer.find(_HEAD_END)
    if head_end == -1:
        if len(buffer) > MAX_HEAD_BYTES:
            raise MalformedResponse("response head too large")
        return AwaitingInitialLine(buffer), None

    head = parse_head(buffer[:head_end])
    rest = buffer[head_end + len(_HEAD_END):]

    content_length = get_header(head.headers, "Content-Length")
    if content_length is not None:
        try:
            remaining = int(content_length.strip())
        except ValueError:
            raise MalformedResponse(f"invalid Content-Length: {content_length!r}") from None
        if remaining < 0:
            raise MalformedResponse(f"invalid Content-Length: {content_length!r}")
        return _feed_content_length(FramingByContentLength(head, remaining), rest)

    if _is_chunked(get_header(head.headers, "Transfer-Encoding")):
        return _feed_chunked(FramingByChunked(head), rest)

    return _complete(head, ())


def _is_chunked(transfer_encoding: str | None) -> bool:
    if not transfer_encoding:
        return False
    codings = [c.strip().lower() for c in transfer_encoding.split(",")]
    return codings[-1] == "chunked"


def _feed_content_length(
    state: FramingByContentLength, data: bytes
) -> tuple[ParserState, Response | None]:
    # Anything past the announced length is not part of this response.
    taken = data[: state.remaining]
    remaining = state.remaining - len(taken)
    body = state.body + (taken,) if taken else state.body
    if remaining == 0:
        return _complete(state.head, body)
    return replace(state, remaining=remaining, body=body), None


def _feed_chunked(state: FramingByChunked, data: bytes) -> tuple[ParserState, Response | None]:
    buffer = state.pending + data
    remaining = state.remaining_chunk_bytes
    expect_crlf = state.expect_crlf
    body = state.body

    while True:
        if expect_crlf:
            if len(buffer) < len(_LINE_END):
                break
            # The CRLF closing a chunk's data is dropped unchecked.
            buffer = buffer[len(_LINE_END):]
            expect_crlf = False

        if remaining == 0:
            line_end = buffer.find(_LINE_END)
            if line_end == -1:
                if len(buffer) > MAX_CHUNK_LINE_BYTES:
                    raise MalformedResponse("chunk size line too long")
                break
            size = parse_chunk_size(buffer[:line_end])
            buffer = buffer[line_end + len(_LINE_END):]
            if size == 0:
                return _complete(state.head, body)
            remaining = size

        if not buffer:
            break

        taken = buffer[:remaining]
        body += (taken,)
        remaining -= len(taken)
        buffer = buffer[len(taken):]
        if remaining == 0:
            expect_crlf = True

    return (
        FramingByChunked(
            head=state.head,
            remaining_chunk_bytes=remaining,
            body=body,
            pending=buffer,
            expect_crlf=expect_crlf,
        ),
        None,
    )
