"""HTTP/1.1 wire format: header codec, request builder, response parser.

Nothing in here does I/O; see ``rqn.transport`` and ``rqn.client``.
"""

from .headers import get_header, parse_headers, serialize_headers
from .message import ParsedURL, RequestOptions, build_request_message, encode_params, parse_url
from .parser import (
    AwaitingInitialLine,
    Complete,
    FramingByChunked,
    FramingByContentLength,
    ParserState,
    Response,
    feed,
)

__all__ = [
    # Headers
    "get_header",
    "parse_headers",
    "serialize_headers",
    # Requests
    "ParsedURL",
    "RequestOptions",
    "build_request_message",
    "encode_params",
    "parse_url",
    # Responses
    "AwaitingInitialLine",
    "Complete",
    "FramingByChunked",
    "FramingByContentLength",
    "ParserState",
    "Response",
    "feed",
]
