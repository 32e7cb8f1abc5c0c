"""Command-line interface for aiopreq."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from rich.console import Console

from . import __version__
from .core.client import ResilientHttpClient
from .errors import ConfigurationError, RequestError
from .http.protocols import TransportAdapter
from .logging_config import setup_logging
from .models.config import ClientConfig
from .models.request import ResolvedResponse

EXIT_OK = 0
EXIT_REQUEST_ERROR = 1
EXIT_CONFIG_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="aiopreq",
        description="Send an HTTP request with automatic retries on network failures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Simple GET
  aiopreq https://example.com

  # Query parameters, retries and a connect timeout
  aiopreq https://example.com/search -q q=foo --retries 3 --connect-timeout 500ms

  # POST a JSON body and show response headers
  aiopreq https://example.com/api -X POST -H "Content-Type: application/json" -d '{"a": 1}' -i

  # Write the raw response bytes
  aiopreq https://example.com/logo.png --raw > logo.png
        """,
    )

    parser.add_argument(
        "url",
        help="URL to request",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Request
    request_group = parser.add_argument_group("request")
    request_group.add_argument(
        "--request",
        "-X",
        dest="method",
        default="GET",
        metavar="METHOD",
        help="HTTP method (default: GET)",
    )
    request_group.add_argument(
        "--query",
        "-q",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter, may be repeated",
    )
    request_group.add_argument(
        "--header",
        "-H",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Request header, may be repeated",
    )
    request_group.add_argument(
        "--data",
        "-d",
        default=None,
        metavar="BODY",
        help="Request body; @FILE reads it from a file",
    )

    # Network settings
    network_group = parser.add_argument_group("network settings")
    network_group.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Retry attempts after a network failure (default: 0)",
    )
    network_group.add_argument(
        "--timeout",
        default=None,
        metavar="DURATION",
        help="Total request timeout, e.g. 30s",
    )
    network_group.add_argument(
        "--connect-timeout",
        default=None,
        metavar="DURATION",
        help="Connect-phase timeout, e.g. 500ms",
    )
    network_group.add_argument(
        "--gzip",
        action="store_true",
        default=None,
        help="Request compressed transfer",
    )
    network_group.add_argument(
        "--no-follow",
        action="store_true",
        help="Do not follow redirects",
    )
    network_group.add_argument(
        "--proxy",
        type=str,
        metavar="URL",
        help="Proxy URL",
    )
    network_group.add_argument(
        "--user-agent",
        type=str,
        help="Custom User-Agent string",
    )
    network_group.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML file with client defaults",
    )

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--include",
        "-i",
        action="store_true",
        help="Show response headers",
    )
    output_group.add_argument(
        "--raw",
        action="store_true",
        help="Write the body as raw bytes without decoding",
    )
    output_group.add_argument(
        "--encoding",
        default=None,
        metavar="CODEC",
        help="Decode the body with this codec instead of the response charset",
    )
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        action="store_true",
        help="Only print the body",
    )

    return parser


def parse_query(items: list[str]) -> dict[str, Any]:
    """Parse KEY=VALUE items; repeated keys become lists."""
    query: dict[str, Any] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"Invalid query parameter (expected KEY=VALUE): {item!r}")
        if key in query:
            existing = query[key]
            query[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            query[key] = value
    return query


def parse_headers(items: list[str]) -> dict[str, str]:
    """Parse 'Name: value' items."""
    headers: dict[str, str] = {}
    for item in items:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise ConfigurationError(f"Invalid header (expected 'NAME: VALUE'): {item!r}")
        headers[name.strip()] = value.strip()
    return headers


def build_config(args: argparse.Namespace) -> ClientConfig:
    """Build client defaults from an optional YAML file and flags."""
    config = ClientConfig.from_yaml_file(args.config) if args.config else ClientConfig()

    updates: dict[str, Any] = {}
    if args.user_agent:
        updates["user_agent"] = args.user_agent
    if args.verbose:
        updates["log_level"] = "DEBUG"
    elif args.quiet:
        updates["log_level"] = "ERROR"
    if not updates:
        return config
    return ClientConfig.model_validate({**config.model_dump(exclude_unset=True), **updates})


def build_options(args: argparse.Namespace) -> dict[str, Any]:
    """Map CLI flags to request options."""
    options: dict[str, Any] = {"method": args.method}
    if args.query:
        options["query"] = parse_query(args.query)
    if args.header:
        options["headers"] = parse_headers(args.header)
    if args.data is not None:
        options["body"] = Path(args.data[1:]).read_bytes() if args.data.startswith("@") else args.data
    if args.retries is not None:
        options["retries"] = args.retries
    if args.timeout is not None:
        options["timeout"] = args.timeout
    if args.connect_timeout is not None:
        options["connect_timeout"] = args.connect_timeout
    if args.gzip:
        options["gzip"] = True
    if args.no_follow:
        options["follow_redirects"] = False
    if args.raw:
        options["encoding"] = None
    elif args.encoding:
        options["encoding"] = args.encoding
    return options


def print_response(response: ResolvedResponse, args: argparse.Namespace, console: Console) -> None:
    """Print status and headers to the console, body to stdout."""
    if not args.quiet:
        color = "green" if response.ok else "red"
        console.print(f"[bold {color}]{response.status}[/bold {color}] {response.method} {response.uri}")
        if response.content_location:
            console.print(f"[yellow]Redirected to:[/yellow] {response.content_location}")
        if args.include:
            for name, value in response.headers.items():
                console.print(f"[cyan]{name}[/cyan]: {value}", highlight=False)
            console.print()

    if isinstance(response.body, bytes):
        sys.stdout.buffer.write(response.body)
        sys.stdout.buffer.flush()
    else:
        sys.stdout.write(response.body)
        if response.body and not response.body.endswith("\n"):
            sys.stdout.write("\n")
        sys.stdout.flush()


def run_request(args: argparse.Namespace, transport: Optional[TransportAdapter] = None) -> int:
    """Run one request with given arguments."""
    console = Console(stderr=True)

    try:
        config = build_config(args)
        options = build_options(args)
    except (ConfigurationError, ValidationError, OSError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return EXIT_CONFIG_ERROR

    setup_logging(config.log_level)

    async def run() -> ResolvedResponse:
        async with ResilientHttpClient(config, transport, proxy=args.proxy) as client:
            return await client.request(args.url, options)

    try:
        response = asyncio.run(run())
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return EXIT_CONFIG_ERROR
    except RequestError as e:
        console.print(f"[red]Error {e.status}:[/red] {e.message}")
        return EXIT_REQUEST_ERROR

    print_response(response, args, console)
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    return run_request(args)


if __name__ == "__main__":
    sys.exit(main())
