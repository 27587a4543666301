"""Command-line entry for icsproxy.

Starts the HTTP proxy, or with ``--transform FILE`` rewrites a local ICS file
and prints the result to stdout.
"""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from . import run_server, run_transform


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the icsproxy CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="icsproxy",
        description="ICS calendar proxy that rewrites event times into a single timezone",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m icsproxy                                  # Serve on 0.0.0.0:3000
  python -m icsproxy --port 8080 --tz Europe/Berlin   # Custom port and default timezone
  python -m icsproxy --transform feed.ics > out.ics   # Transform a local file
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number for the web server (default: 3000, or from ICSPROXY_WEB_PORT env var)",
    )
    parser.add_argument(
        "--host",
        metavar="HOST",
        help="Address to bind (default: 0.0.0.0, or from ICSPROXY_WEB_HOST env var)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="YAML or JSON configuration file",
    )
    parser.add_argument(
        "--tz",
        metavar="TZ",
        help="Default IANA target timezone (default: Europe/Zurich)",
    )
    parser.add_argument(
        "--url",
        metavar="URL",
        help="Default upstream ICS URL used when a request has no ?url=",
    )
    parser.add_argument(
        "--transform",
        metavar="FILE",
        help="Transform a local ICS file, print it to stdout and exit",
    )

    return parser


def main() -> NoReturn:
    """Run the icsproxy CLI."""
    parser = _create_parser()
    args = parser.parse_args()

    if args.transform:
        try:
            output = run_transform(args)
        except OSError as exc:
            print(f"icsproxy: cannot read {args.transform}: {exc}", file=sys.stderr)
            sys.exit(1)
        sys.stdout.write(output)
        sys.exit(0)

    run_server(args)
    sys.exit(0)


if __name__ == "__main__":
    main()
