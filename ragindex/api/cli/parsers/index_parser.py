"""Index command argument parser for RagIndex CLI."""

import argparse
from pathlib import Path
from typing import Any, cast

from .main_parser import add_common_arguments, add_database_argument, add_embedding_arguments


def add_index_subparser(subparsers: Any) -> argparse.ArgumentParser:
    """Add index command subparser to the main parser.

    Args:
        subparsers: Subparsers object from the main argument parser

    Returns:
        The configured index subparser
    """
    index_parser = subparsers.add_parser(
        "index",
        help="Index a directory incrementally",
        description="Scan a directory, chunk changed files and store their embeddings. Unchanged files are skipped.",
    )

    index_parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=Path("."),
        help="Directory path to index (default: current directory)",
    )

    add_common_arguments(index_parser)
    add_database_argument(index_parser)
    add_embedding_arguments(index_parser)

    index_parser.add_argument(
        "--force",
        action="store_true",
        help="Re-embed every file, even if it hasn't changed",
    )

    index_parser.add_argument(
        "--include-ext",
        action="append",
        default=[],
        help="File extension to index, without the dot (can be specified multiple times)",
    )

    index_parser.add_argument(
        "--exclude-dir",
        action="append",
        default=[],
        help="Directory name to skip (can be specified multiple times)",
    )

    return cast(argparse.ArgumentParser, index_parser)


__all__: list[str] = ["add_index_subparser"]
