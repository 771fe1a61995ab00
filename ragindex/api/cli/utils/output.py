"""Output formatting utilities for RagIndex CLI commands."""

import json
import sys
from datetime import datetime
from typing import Any, Dict, Optional


class OutputFormatter:
    """Handles consistent output formatting across CLI commands."""

    def __init__(self, verbose: bool = False):
        """Initialize output formatter.

        Args:
            verbose: Whether to enable verbose output
        """
        self.verbose = verbose

    def info(self, message: str) -> None:
        print(f"ℹ️  {message}")

    def success(self, message: str) -> None:
        print(f"✅ {message}")

    def warning(self, message: str) -> None:
        print(f"⚠️  {message}")

    def error(self, message: str) -> None:
        print(f"❌ {message}", file=sys.stderr)

    def verbose_info(self, message: str) -> None:
        """Print a verbose info message if verbose mode is enabled.

        Args:
            message: Message to print
        """
        if self.verbose:
            print(f"🔍 {message}")

    def json_output(self, data: Dict[str, Any]) -> None:
        """Print data as formatted JSON.

        Args:
            data: Data to output as JSON
        """
        print(json.dumps(data, indent=2, default=str))


def format_stats(stats: Dict[str, Any]) -> str:
    """Format store statistics for display.

    Args:
        stats: Statistics dictionary from the vector store

    Returns:
        Formatted statistics string
    """
    files = stats.get('files', 0)
    chunks = stats.get('chunks', 0)
    return f"{files} files, {chunks} chunks"


def format_duration(seconds: float) -> str:
    """Format duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Human-readable duration string
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}m"
    else:
        return f"{seconds / 3600:.1f}h"


def format_timestamp(timestamp: Optional[float]) -> str:
    """Format a unix timestamp for display, or 'never' when missing."""
    if timestamp is None:
        return "never"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def format_progress(current: int, total: int, prefix: str = "") -> str:
    """Format progress indicator.

    Args:
        current: Current progress value
        total: Total value
        prefix: Optional prefix text

    Returns:
        Formatted progress string
    """
    percentage = (current / total * 100) if total > 0 else 0
    prefix_text = f"{prefix} " if prefix else ""
    return f"{prefix_text}({current}/{total}, {percentage:.1f}%)"


def preview(text: str, limit: int = 200) -> str:
    """Collapse whitespace and truncate chunk text for terminal display."""
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return flat[:limit - 3] + "..."
