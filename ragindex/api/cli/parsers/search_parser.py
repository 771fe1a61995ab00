"""Search command argument parser for RagIndex CLI."""

import argparse
from typing import Any, cast

from .main_parser import (
    add_common_arguments,
    add_database_argument,
    add_embedding_arguments,
    add_json_argument,
)


def add_search_subparser(subparsers: Any) -> argparse.ArgumentParser:
    """Add search command subparser to the main parser.

    Args:
        subparsers: Subparsers object from the main argument parser

    Returns:
        The configured search subparser
    """
    search_parser = subparsers.add_parser(
        "search",
        help="Retrieve the chunks most similar to a query",
        description="Embed a query and print the most similar indexed chunks.",
    )

    search_parser.add_argument(
        "query",
        help="Natural language query",
    )

    search_parser.add_argument(
        "-k",
        type=int,
        default=None,
        help="Number of results (default: retrieval.default_k)",
    )

    search_parser.add_argument(
        "--min-similarity",
        type=float,
        default=None,
        help="Drop results below this cosine similarity",
    )

    search_parser.add_argument(
        "--rerank",
        action="store_true",
        help="Re-rank candidates with a cosine/keyword hybrid score",
    )

    add_common_arguments(search_parser)
    add_database_argument(search_parser)
    add_embedding_arguments(search_parser)
    add_json_argument(search_parser)

    return cast(argparse.ArgumentParser, search_parser)


__all__: list[str] = ["add_search_subparser"]
