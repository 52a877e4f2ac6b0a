"""Request orchestration: build, connect, send, parse, follow redirects."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import urljoin

import anyio
from anyio.abc import ByteStream

from . import transport
from .config import ClientConfig
from .errors import IncompleteResponse, TooManyRedirects, TransportError
from .http.message import ParsedURL, RequestOptions, build_request_message, parse_url
from .http.parser import AwaitingInitialLine, ParserState, Response, feed

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ClientConfig()


async def exchange(stream: ByteStream, message: bytes, *, receive_size: int = 65536) -> Response:
    """
    Write one request on ``stream`` and read back one response.

    The stream is closed when the response is complete or on any error.
    """
    async with stream:
        try:
            await stream.send(message)
        except (OSError, anyio.BrokenResourceError, anyio.ClosedResourceError) as e:
            raise TransportError(f"send failed: {e}") from e

        state: ParserState = AwaitingInitialLine()
        while True:
            try:
                data = await stream.receive(receive_size)
            except anyio.EndOfStream:
                raise IncompleteResponse(
                    f"connection closed before response was complete ({type(state).__name__})"
                ) from None
            except (OSError, anyio.BrokenResourceError, anyio.ClosedResourceError) as e:
                raise TransportError(f"receive failed: {e}") from e

            state, response = feed(state, data)
            if response is not None:
                return response


async def _request_once(method: str, url: ParsedURL, options: RequestOptions, config: ClientConfig) -> Response:
    message = build_request_message(method, url, options)
    stream = await transport.open_stream(url, config)
    logger.debug(f"{method} {url.hostname}{url.target} ({len(message)} bytes)")
    return await exchange(stream, message, receive_size=config.receive_size)


def _coerce_options(options: RequestOptions | Mapping[str, Any] | None) -> RequestOptions:
    if options is None:
        return RequestOptions()
    if isinstance(options, RequestOptions):
        return options
    return RequestOptions(**options)


async def request(
    method: str,
    url: str,
    options: RequestOptions | Mapping[str, Any] | None = None,
    *,
    config: ClientConfig | None = None,
) -> Response:
    """
    Perform ``method`` on ``url`` and return the final Response.

    Any response carrying a ``Location`` header is treated as a redirect:
    the same method and options are sent to the new location and that
    response is returned instead. Hops run one after another, each on a
    fresh connection.

    Raises:
        UnsupportedProtocol: scheme is neither http nor https
        TransportError: connect/send/receive failed
        MalformedResponse: the peer did not speak valid HTTP/1.1
        TooManyRedirects: more than ``config.max_redirects`` hops
        TimeoutError: a hop exceeded ``config.timeout``
    """
    config = config or _DEFAULT_CONFIG
    options = _coerce_options(options)
    method = method.upper()

    hops = 0
    while True:
        parsed = parse_url(url)
        if config.timeout is None:
            response = await _request_once(method, parsed, options, config)
        else:
            with anyio.fail_after(config.timeout):
                response = await _request_once(method, parsed, options, config)

        location = response.header("Location")
        if not location:
            return response

        if config.max_redirects is not None and hops >= config.max_redirects:
            raise TooManyRedirects(config.max_redirects, url)
        hops += 1

        next_url = urljoin(url, location)
        logger.debug(f"{response.status_code} redirect {url} -> {next_url}")
        url = next_url


async def get(url: str, options: RequestOptions | Mapping[str, Any] | None = None, **kwargs) -> Response:
    return await request("GET", url, options, **kwargs)


async def post(url: str, options: RequestOptions | Mapping[str, Any] | None = None, **kwargs) -> Response:
    return await request("POST", url, options, **kwargs)


async def put(url: str, options: RequestOptions | Mapping[str, Any] | None = None, **kwargs) -> Response:
    return await request("PUT", url, options, **kwargs)


async def delete(url: str, options: RequestOptions | Mapping[str, Any] | None = None, **kwargs) -> Response:
    return await request("DELETE", url, options, **kwargs)
