"""Stats command argument parser for RagIndex CLI."""

import argparse
from typing import Any, cast

from .main_parser import (
    add_common_arguments,
    add_database_argument,
    add_embedding_arguments,
    add_json_argument,
)


def add_stats_subparser(subparsers: Any) -> argparse.ArgumentParser:
    """Add stats command subparser to the main parser.

    Args:
        subparsers: Subparsers object from the main argument parser

    Returns:
        The configured stats subparser
    """
    stats_parser = subparsers.add_parser(
        "stats",
        help="Show index statistics and embedding service readiness",
    )

    add_common_arguments(stats_parser)
    add_database_argument(stats_parser)
    add_embedding_arguments(stats_parser)
    add_json_argument(stats_parser)

    return cast(argparse.ArgumentParser, stats_parser)


__all__: list[str] = ["add_stats_subparser"]
