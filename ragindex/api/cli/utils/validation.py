"""Validation utilities for RagIndex CLI arguments."""

from pathlib import Path
from typing import Optional

from loguru import logger


def validate_path(path: Path, must_exist: bool = True, must_be_dir: bool = True) -> bool:
    """Validate a file system path.

    Args:
        path: Path to validate
        must_exist: Whether the path must exist
        must_be_dir: Whether the path must be a directory

    Returns:
        True if valid, False otherwise
    """
    if must_exist and not path.exists():
        logger.error(f"Path does not exist: {path}")
        return False

    if must_exist and must_be_dir and not path.is_dir():
        logger.error(f"Path is not a directory: {path}")
        return False

    return True


def validate_provider_args(missing: list[str], provider: str) -> bool:
    """Report configuration the selected embedding provider still needs.

    Args:
        missing: Names returned by RagIndexConfig.get_missing_config()
        provider: Provider name

    Returns:
        True if nothing is missing
    """
    if not missing:
        return True

    hints = {
        'embedding.api_key': "Set OPENAI_API_KEY or use --api-key",
        'embedding.base_url': "Use --base-url",
    }
    for item in missing:
        hint = hints.get(item.split(' ')[0], '')
        logger.error(f"{provider} provider requires {item}. {hint}".rstrip())
    return False


def validate_search_args(k: Optional[int], min_similarity: Optional[float]) -> bool:
    """Validate retrieval arguments.

    Args:
        k: Requested number of results
        min_similarity: Optional similarity cut-off

    Returns:
        True if valid, False otherwise
    """
    if k is not None and k < 1:
        logger.error("-k must be at least 1")
        return False

    if min_similarity is not None and not -1.0 <= min_similarity <= 1.0:
        logger.error("--min-similarity must be between -1 and 1")
        return False

    return True


def ensure_database_directory(db_path: Path) -> bool:
    """Ensure the database directory exists.

    Args:
        db_path: Path to database file

    Returns:
        True if directory exists or was created successfully
    """
    if str(db_path) == ":memory:":
        return True
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        logger.error(f"Failed to create database directory: {e}")
        return False

