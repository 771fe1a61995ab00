"""Modular CLI entry point for RagIndex."""

import argparse
import asyncio
import sys

from loguru import logger


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI.

    Args:
        verbose: Whether to enable verbose logging
    """
    logger.remove()

    if verbose:
        logger.add(
            sys.stderr,
            level="DEBUG",
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
        )
    else:
        logger.add(
            sys.stderr,
            level="INFO",
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
        )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the complete argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    from .parsers import (
        add_index_subparser,
        add_search_subparser,
        add_stats_subparser,
        create_main_parser,
        setup_subparsers,
    )

    parser = create_main_parser()
    subparsers = setup_subparsers(parser)

    add_index_subparser(subparsers)
    add_search_subparser(subparsers)
    add_stats_subparser(subparsers)

    return parser


async def async_main(argv: list[str] | None = None) -> None:
    """Async main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(getattr(args, "verbose", False))

    try:
        # Commands import the service layer, so load them only once parsing succeeded
        if args.command == "index":
            from .commands.index import index_command
            await index_command(args)
        elif args.command == "search":
            from .commands.search import search_command
            await search_command(args)
        elif args.command == "stats":
            from .commands.stats import stats_command
            await stats_command(args)
        else:
            logger.error(f"Unknown command: {args.command}")
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Command failed: {e}")
        logger.opt(exception=e).debug("Full error details")
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the CLI."""
    try:
        asyncio.run(async_main(argv))
    except KeyboardInterrupt:
        sys.exit(1)


if __name__ == "__main__":
    main()
