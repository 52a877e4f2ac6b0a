"""Error types raised by the client."""


class RqnError(Exception):
    """Base class for every error raised by rqn."""
    pass


class UnsupportedProtocol(RqnError, ValueError):
    """Raised for a URL scheme other than http or https, before any I/O."""

    def __init__(self, scheme: str):
        super().__init__(f"Invalid protocol: {scheme}:")
        self.scheme = scheme


class TransportError(RqnError, OSError):
    """Raised when the underlying stream fails (refused, reset, DNS...).

    The original exception is kept as ``__cause__``.
    """
    pass


class MalformedResponse(RqnError):
    """Raised when the peer sends something that is not valid HTTP/1.1."""
    pass


class IncompleteResponse(MalformedResponse):
    """Raised when the stream ends before the response is complete."""
    pass


class TooManyRedirects(RqnError):
    """Raised when a redirect chain exceeds ``ClientConfig.max_redirects``."""

    def __init__(self, max_redirects: int, url: str):
        super().__init__(f"Exceeded {max_redirects} redirects (last: {url})")
        self.max_redirects = max_redirects
        self.url = url
