"""Minimal HTTP/1.1 client on raw AnyIO sockets."""

from .client import delete, exchange, get, post, put, request
from .config import ClientConfig
from .errors import (
    IncompleteResponse,
    MalformedResponse,
    RqnError,
    TooManyRedirects,
    TransportError,
    UnsupportedProtocol,
)
from .http import RequestOptions, Response

__all__ = [
    # Requests
    "request",
    "get",
    "post",
    "put",
    "delete",
    "exchange",
    # Types
    "ClientConfig",
    "RequestOptions",
    "Response",
    # Errors
    "RqnError",
    "UnsupportedProtocol",
    "TransportError",
    "MalformedResponse",
    "IncompleteResponse",
    "TooManyRedirects",
]
