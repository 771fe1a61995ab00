"""Argument parser utilities for RagIndex CLI commands."""

from .index_parser import add_index_subparser
from .main_parser import create_main_parser, setup_subparsers
from .search_parser import add_search_subparser
from .stats_parser import add_stats_subparser

__all__ = [
    "create_main_parser",
    "setup_subparsers",
    "add_index_subparser",
    "add_search_subparser",
    "add_stats_subparser",
]
