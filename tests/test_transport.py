"""Tests for stream selection."""

import ssl

import anyio
import pytest
from anyio.abc import SocketAttribute

from rqn.config import ClientConfig
from rqn.errors import TransportError, UnsupportedProtocol
from rqn.http.message import parse_url
from rqn.transport import make_ssl_context, open_stream, resolve_address


class TestResolveAddress:
    def test_http_default_port(self):
        assert resolve_address(parse_url("http://api.github.com/")) == ("api.github.com", 80, False)

    def test_https_default_port(self):
        assert resolve_address(parse_url("https://api.github.com/")) == ("api.github.com", 443, True)

    def test_explicit_port(self):
        assert resolve_address(parse_url("https://localhost:8443/")) == ("localhost", 8443, True)

    def test_unsupported_scheme(self):
        with pytest.raises(UnsupportedProtocol, match="Invalid protocol: ws:"):
            resolve_address(parse_url("ws://localhost:3000"))


class TestSslContext:
    def test_verification_off(self):
        context = make_ssl_context(verify=False)
        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False

    def test_verification_on(self):
        context = make_ssl_context(verify=True)
        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.check_hostname is True


@pytest.mark.anyio
async def test_unsupported_scheme_never_connects(monkeypatch):
    async def no_connect(*args, **kwargs):
        raise AssertionError("connect_tcp must not be called")

    monkeypatch.setattr(anyio, "connect_tcp", no_connect)
    with pytest.raises(UnsupportedProtocol):
        await open_stream(parse_url("ftp://localhost/file"), ClientConfig())


@pytest.mark.anyio
async def test_https_passes_tls_settings(monkeypatch):
    calls = []

    async def fake_connect(host, port, **kwargs):
        calls.append((host, port, kwargs))
        return object()

    monkeypatch.setattr(anyio, "connect_tcp", fake_connect)
    await open_stream(parse_url("https://example.com/"), ClientConfig(verify_tls=True))

    [(host, port, kwargs)] = calls
    assert (host, port) == ("example.com", 443)
    assert kwargs["tls"] is True
    assert kwargs["tls_hostname"] == "example.com"
    assert kwargs["ssl_context"].verify_mode == ssl.CERT_REQUIRED


@pytest.mark.anyio
async def test_http_is_plaintext(monkeypatch):
    calls = []

    async def fake_connect(host, port, **kwargs):
        calls.append((host, port, kwargs))
        return object()

    monkeypatch.setattr(anyio, "connect_tcp", fake_connect)
    await open_stream(parse_url("http://example.com:8080/"), ClientConfig())

    [(host, port, kwargs)] = calls
    assert (host, port) == ("example.com", 8080)
    assert kwargs["tls"] is False
    assert kwargs["ssl_context"] is None


@pytest.mark.anyio
async def test_connection_refused_is_transport_error():
    listener = await anyio.create_tcp_listener(local_host="127.0.0.1")
    port = listener.extra(SocketAttribute.local_port)
    await listener.aclose()

    with pytest.raises(TransportError) as excinfo:
        await open_stream(parse_url(f"http://127.0.0.1:{port}/"), ClientConfig())
    assert isinstance(excinfo.value.__cause__, OSError)
