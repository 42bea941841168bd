"""Command-line interface for deskremote.

Provides the main entry point for running the server and for checking
individual backends from a terminal.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="deskremote",
        description="Remote-control relay: phone commands to desktop input",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/deskremote.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the WebSocket server")
    serve_parser.add_argument("--host", type=str, default=None, help="Override listen address")
    serve_parser.add_argument("--port", type=int, default=None, help="Override listen port")

    subparsers.add_parser("list-apps", help="Print the applications GetCapabilities would report")

    return parser.parse_args(argv)


async def _list_apps(settings) -> None:
    """Enumerate applications from the configured search paths."""
    from deskremote.backends.apps import DesktopEntryLister

    lister = DesktopEntryLister([(p.path, p.priority) for p in settings.apps.search_paths])
    apps = await lister.list_applications()
    for app in apps:
        print(f"{app.name}\t{app.locator}")
    print(f"\n{len(apps)} applications")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the deskremote CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from deskremote.config.settings import load_settings
    from deskremote.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        if args.host:
            settings.server.host = args.host
        if args.port:
            settings.server.port = args.port
        logger.info("Starting server on %s:%d", settings.server.host, settings.server.port)
        from deskremote.server import main as serve

        serve(settings)

    elif args.command == "list-apps":
        asyncio.run(_list_apps(settings))


if __name__ == "__main__":
    main()
