"""Shared utilities for RagIndex CLI commands."""

from .config_helpers import args_to_config
from .output import OutputFormatter, format_duration, format_stats
from .validation import ensure_database_directory, validate_path, validate_provider_args

__all__ = [
    "OutputFormatter",
    "format_stats",
    "format_duration",
    "args_to_config",
    "validate_path",
    "validate_provider_args",
    "ensure_database_directory",
]
