"""Main argument parser for RagIndex CLI."""

import argparse
from pathlib import Path


def create_main_parser() -> argparse.ArgumentParser:
    """Create and configure the main argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    from ragindex import __version__

    parser = argparse.ArgumentParser(
        prog="ragindex",
        description="Incremental file indexing and similarity retrieval for grounding LLM prompts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ragindex index /path/to/project
  ragindex index . --provider openai --model text-embedding-3-small
  ragindex index . --include-ext kt --include-ext md --exclude-dir build
  ragindex search "how are retries configured" -k 5
  ragindex stats --json
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ragindex {__version__}",
    )

    return parser


def setup_subparsers(parser: argparse.ArgumentParser) -> argparse._SubParsersAction:
    """Set up subparsers for the main parser.

    Args:
        parser: Main argument parser

    Returns:
        Subparsers action for adding command parsers
    """
    return parser.add_subparsers(dest="command", help="Available commands")


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add common arguments used across multiple commands.

    Args:
        parser: Parser to add arguments to
    """
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )


def add_database_argument(parser: argparse.ArgumentParser) -> None:
    """Add database path argument to a parser.

    Args:
        parser: Parser to add argument to
    """
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="DuckDB database file path, or :memory: (default: .ragindex/index.duckdb)",
    )


def add_embedding_arguments(parser: argparse.ArgumentParser) -> None:
    """Add embedding provider arguments to a parser.

    Args:
        parser: Parser to add arguments to
    """
    parser.add_argument(
        "--provider",
        default=None,
        choices=["ollama", "openai", "openai-compatible"],
        help="Embedding provider to use (default: ollama)",
    )

    parser.add_argument(
        "--model",
        help="Embedding model to use (defaults to provider default)",
    )

    parser.add_argument(
        "--api-key",
        help="API key for embedding provider (uses env var if not specified)",
    )

    parser.add_argument(
        "--base-url",
        help="Base URL for embedding API (uses provider default if not specified)",
    )


def add_json_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )


__all__ = [
    "create_main_parser",
    "setup_subparsers",
    "add_common_arguments",
    "add_database_argument",
    "add_embedding_arguments",
    "add_json_argument",
]
