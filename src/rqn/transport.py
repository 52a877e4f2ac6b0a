"""Stream selection: plaintext TCP for http, TLS for https.

Everything above this module talks to an ``anyio.abc.ByteStream``:
``send()``, ``receive()`` and ``aclose()``.
"""

from __future__ import annotations

import logging
import ssl

import anyio
from anyio.abc import ByteStream

from .config import ClientConfig
from .errors import TransportError, UnsupportedProtocol
from .http.message import ParsedURL

logger = logging.getLogger(__name__)

DEFAULT_PORTS: dict[str, int] = {
    "http": 80,
    "https": 443,
}


def resolve_address(url: ParsedURL) -> tuple[str, int, bool]:
    """Return ``(host, port, use_tls)``. Raises UnsupportedProtocol for other schemes."""
    default_port = DEFAULT_PORTS.get(url.scheme)
    if default_port is None:
        raise UnsupportedProtocol(url.scheme)
    return url.hostname, url.port or default_port, url.scheme == "https"


def make_ssl_context(verify: bool) -> ssl.SSLContext:
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


async def open_stream(url: ParsedURL, config: ClientConfig) -> ByteStream:
    """Connect to the host named by ``url``."""
    host, port, use_tls = resolve_address(url)

    ssl_context = None
    if use_tls:
        if not config.verify_tls:
            logger.warning(f"TLS certificate verification disabled for {host}:{port}")
        ssl_context = make_ssl_context(config.verify_tls)

    logger.debug(f"Connecting to {host}:{port} (tls={use_tls})")
    try:
        return await anyio.connect_tcp(
            host,
            port,
            tls=use_tls,
            ssl_context=ssl_context,
            tls_hostname=host if use_tls else None,
            # Many servers close without a TLS close_notify.
            tls_standard_compatible=False,
        )
    except (OSError, anyio.BrokenResourceError) as e:
        raise TransportError(f"cannot connect to {host}:{port}: {e}") from e
