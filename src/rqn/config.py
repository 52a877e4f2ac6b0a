"""Client configuration."""

import os
from dataclasses import dataclass


_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings shared by every request made with this config.

    Attributes:
        verify_tls: Validate server certificates on https connections.
            Off by default: an https response is NOT proof of who sent it.
        max_redirects: Maximum number of Location hops to follow.
            None follows redirects without limit (a cyclic chain never ends).
        timeout: Seconds allowed for one request/response hop. None waits forever.
        receive_size: Maximum number of bytes read from the stream at once.
    """
    verify_tls: bool = False
    max_redirects: int | None = None
    timeout: float | None = None
    receive_size: int = 65536

    def __post_init__(self):
        if self.max_redirects is not None and self.max_redirects < 0:
            raise ValueError("max_redirects cannot be negative")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.receive_size <= 0:
            raise ValueError("receive_size must be positive")

    @classmethod
    def from_env(cls, prefix: str = "RQN_") -> "ClientConfig":
        """Build a config from environment variables, e.g. RQN_TIMEOUT=5."""
        kwargs = {}

        verify = os.environ.get(f"{prefix}VERIFY_TLS")
        if verify is not None:
            kwargs["verify_tls"] = verify.strip().lower() in _TRUE

        max_redirects = os.environ.get(f"{prefix}MAX_REDIRECTS")
        if max_redirects:
            kwargs["max_redirects"] = int(max_redirects)

        timeout = os.environ.get(f"{prefix}TIMEOUT")
        if timeout:
            kwargs["timeout"] = float(timeout)

        receive_size = os.environ.get(f"{prefix}RECEIVE_SIZE")
        if receive_size:
            kwargs["receive_size"] = int(receive_size)

        return cls(**kwargs)
