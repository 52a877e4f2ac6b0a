"""
Command line front end.

    python -m rqn https://example.com/
    python -m rqn -X POST http://127.0.0.1:8080/echo -d 'hello there'
    python -m rqn -X PUT http://127.0.0.1:8080/json --json '{"foo": "bar"}' -i
"""

import argparse
import functools
import json
import logging
import sys

import anyio

from .client import request
from .config import ClientConfig
from .errors import RqnError
from .http.message import RequestOptions


def _parse_header(value: str) -> tuple[str, str]:
    key, sep, val = value.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected 'Name: value', got {value!r}")
    return key.strip(), val.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rqn", description="Send one HTTP/1.1 request and print the response")
    parser.add_argument("url")
    parser.add_argument("--request", "-X", default="GET", help="HTTP method (default: GET)")
    parser.add_argument(
        "--header", "-H",
        action="append",
        type=_parse_header,
        default=[],
        help="Extra request header, e.g. -H 'User-Agent: rqn' (repeatable)",
    )
    body = parser.add_mutually_exclusive_group()
    body.add_argument("--data", "-d", help="Raw text body (text/plain)")
    body.add_argument("--json", dest="json_body", help="JSON document to send as the body")
    parser.add_argument("--include", "-i", action="store_true", help="Print status line and headers")
    parser.add_argument("--max-redirects", type=int, default=None)
    parser.add_argument("--timeout", type=float, default=None, help="Seconds per request hop")
    parser.add_argument("--verify", action="store_true", help="Verify TLS certificates")
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        env = ClientConfig.from_env()
    except ValueError as e:
        print(f"rqn: invalid RQN_* setting: {e}", file=sys.stderr)
        return 1

    config = ClientConfig(
        verify_tls=args.verify or env.verify_tls,
        max_redirects=args.max_redirects if args.max_redirects is not None else env.max_redirects,
        timeout=args.timeout if args.timeout is not None else env.timeout,
        receive_size=env.receive_size,
    )
    options = RequestOptions(
        headers=dict(args.header) or None,
        body=args.data,
        json=json.loads(args.json_body) if args.json_body is not None else None,
    )

    try:
        response = anyio.run(functools.partial(request, args.request, args.url, options, config=config))
    except (RqnError, TimeoutError) as e:
        print(f"rqn: {e}", file=sys.stderr)
        return 1

    if args.include:
        print(f"{response.status_code} {response.status_message}".rstrip())
        for key, value in response.headers.items():
            print(f"{key}: {value}")
        print()
    sys.stdout.write(response.body)
    return 0


if __name__ == "__main__":
    sys.exit(main())
