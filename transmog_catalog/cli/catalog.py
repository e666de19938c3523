"""Argument parsing and dispatch for ``python -m transmog_catalog.cli``."""

from __future__ import annotations

import argparse
import asyncio
import sys

from transmog_catalog.cli.hydrate import handle_hydrate
from transmog_catalog.cli.icons import handle_icons
from transmog_catalog.cli.stats import handle_stats
from transmog_catalog.config.settings import Settings
from transmog_catalog.utils.logging import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m transmog_catalog.cli",
        description="Maintain the transmog set catalog.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Catalog commands")

    # -- hydrate --
    hydrate_parser = subparsers.add_parser("hydrate", help="Run one hydration pass")
    hydrate_parser.add_argument(
        "--limit", type=int, default=None, help="Hydrate at most N sets this run"
    )

    # -- stats --
    subparsers.add_parser("stats", help="Show set counts by expansion, quality and class")

    # -- icons --
    icons_parser = subparsers.add_parser(
        "icons", help="Resolve item icons from the community wiki (no API token)"
    )
    icons_parser.add_argument(
        "--download", metavar="DIR", default=None, help="Also download icon images into DIR"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse the subcommand, load Settings and dispatch to its handler."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    configure_logging(
        log_level=app_settings.log_level, app_env=app_settings.app_env, stream=sys.stderr
    )

    if args.command == "hydrate":
        exit_code = asyncio.run(handle_hydrate(args, app_settings))
    elif args.command == "stats":
        exit_code = asyncio.run(handle_stats(app_settings))
    elif args.command == "icons":
        exit_code = asyncio.run(handle_icons(args, app_settings))
    else:
        parser.print_help()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
