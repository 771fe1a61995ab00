"""RagIndex CLI API package - modular command-line interface."""

# Commands are imported lazily in main.py when needed

__all__ = [
    "index_command",
    "search_command",
    "stats_command",
]
