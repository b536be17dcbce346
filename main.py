# main.py

"""Entry point for the door_catalog search engine CLI."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging

logger = logging.getLogger("door_catalog.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="door_catalog",
        description="Door store catalog ingestion and product search.",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Free-text product query, e.g. 'входные до 30 тыс'.",
    )
    parser.add_argument(
        "-l",
        "--limit",
        type=int,
        default=None,
        help="Maximum number of results (default: 7).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        default=False,
        help="Re-import the feed now and update the cache.",
    )
    parser.add_argument(
        "--categories",
        action="store_true",
        default=False,
        help="List categories with product counts.",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Check feed reachability and cache freshness.",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        default=False,
        help="Keep running and refresh the catalog weekly.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Echo INFO logs to stderr.",
    )
    return parser


def main() -> None:
    """Dispatch to the requested CLI command."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(
        logging.INFO if args.verbose else logging.WARNING
    )
    logger.info("door_catalog starting, log file: %s", log_file)

    from src.cli import runner

    if args.refresh:
        coro = runner.run_refresh()
    elif args.health:
        coro = runner.run_health_check()
    elif args.categories:
        coro = runner.run_categories()
    elif args.watch:
        coro = runner.run_watch()
    elif args.query is not None:
        coro = runner.cli_search(
            query=args.query,
            limit=args.limit,
            output_format=args.output_format,
        )
    else:
        parser.print_help()
        sys.exit(2)

    try:
        exit_code = asyncio.run(coro)
    except KeyboardInterrupt:
        logger.info("door_catalog interrupted")
        exit_code = 0
    except Exception:
        logger.critical("Fatal error", exc_info=True)
        raise
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
