"""
Fetch Example

Sends a few requests with rqn and prints what came back.

Run:
  uv run python examples/01_fetch.py

The https request goes out with certificate verification off (the default);
pass ClientConfig(verify_tls=True) to turn it on.
"""

from __future__ import annotations

import logging

import anyio

import rqn
from rqn import ClientConfig


async def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Plain GET, default port 80.
    res = await rqn.get("http://example.com/", {"headers": {"User-Agent": "rqn"}})
    print(res.status_code, res.status_message, len(res.body), "chars")

    # TLS with verification and a bounded redirect chain.
    config = ClientConfig(verify_tls=True, max_redirects=5, timeout=10.0)
    res = await rqn.get("https://api.github.com", {"headers": {"User-Agent": "rqn"}}, config=config)
    print(res.status_code, res.header("content-type"))

    # JSON body; Content-Length counts bytes.
    res = await rqn.post("https://httpbin.org/post", {"json": {"greeting": "héllo"}}, config=config)
    print(res.body)


if __name__ == "__main__":
    anyio.run(main)
