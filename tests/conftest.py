"""Shared test helpers: a scripted in-memory stream and a canned local server."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
import inspect
from typing import Any, Callable, Iterable

import anyio
import pytest
from anyio.abc import ByteStream, SocketAttribute, SocketStream


@pytest.fixture
def anyio_backend():
    return "asyncio"


class ScriptedStream(ByteStream):
    """
    ByteStream that replays canned chunks exactly as given.

    Records everything sent and how many times it was closed.
    """

    def __init__(self, chunks: Iterable[bytes] = ()):
        self._chunks = list(chunks)
        self.sent = bytearray()
        self.close_count = 0

    async def send(self, item: bytes) -> None:
        self.sent.extend(item)

    async def send_eof(self) -> None:
        pass

    async def receive(self, max_bytes: int = 65536) -> bytes:
        if not self._chunks:
            raise anyio.EndOfStream
        chunk = self._chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk
        return chunk

    async def aclose(self) -> None:
        self.close_count += 1


@dataclass
class ReceivedRequest:
    method: str
    target: str
    headers: dict[str, str]
    body: bytes
    raw: bytes

    @property
    def path(self) -> str:
        return self.target.split("?", 1)[0]


Reply = Any
Handler = Callable[[ReceivedRequest], Any]


async def _read_request(stream: SocketStream) -> ReceivedRequest | None:
    data = b""
    while b"\r\n\r\n" not in data:
        try:
            data += await stream.receive()
        except anyio.EndOfStream:
            return None
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    method, target, _version = lines[0].split(" ")
    headers = {}
    for line in lines[1:]:
        key, _, value = line.partition(":")
        headers[key] = value.strip()
    length = int(headers.get("Content-Length", "0"))
    while len(body) < length:
        body += await stream.receive()
    return ReceivedRequest(method, target, headers, body, head + b"\r\n\r\n" + body)


class CannedServer:
    """
    Tiny HTTP server for end-to-end tests.

    ``routes`` maps ``(method, path)`` to a reply: raw bytes, a list of
    byte pieces sent one at a time, or a callable producing either.
    Every request received is kept in ``requests``.
    """

    def __init__(self, routes: dict[tuple[str, str], Reply | Handler], *, hold_open: bool = False):
        self.routes = routes
        self.hold_open = hold_open
        self.requests: list[ReceivedRequest] = []
        self.port = 0

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    async def handle(self, stream: SocketStream) -> None:
        async with stream:
            request = await _read_request(stream)
            if request is None:
                return
            self.requests.append(request)

            reply = self.routes.get((request.method, request.path))
            if reply is None:
                reply = b"HTTP/1.1 404 Not Found\r\nContent-Length: 9\r\n\r\nnot found"
            if callable(reply):
                reply = reply(request)
                if inspect.isawaitable(reply):
                    reply = await reply

            for piece in reply if isinstance(reply, list) else [reply]:
                await stream.send(piece)
                await anyio.sleep(0.01)

            if self.hold_open:
                await anyio.sleep_forever()


@asynccontextmanager
async def serve(routes, **kwargs):
    server = CannedServer(routes, **kwargs)
    listener = await anyio.create_tcp_listener(local_host="127.0.0.1")
    server.port = listener.extra(SocketAttribute.local_port)
    async with listener, anyio.create_task_group() as tg:
        tg.start_soon(listener.serve, server.handle)
        try:
            yield server
        finally:
            tg.cancel_scope.cancel()


def text_response(body: str, status: str = "200 OK", headers: dict[str, str] | None = None) -> bytes:
    payload = body.encode("utf-8")
    lines = [f"HTTP/1.1 {status}", f"Content-Length: {len(payload)}"]
    lines += [f"{k}: {v}" for k, v in (headers or {}).items()]
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8") + payload
