"""Index command module - handles incremental directory indexing."""

import argparse
import sys
from pathlib import Path

from loguru import logger

from core.models import (
    IndexingCancelled,
    IndexingError,
    IndexingNotReady,
    IndexingResult,
    IndexingSuccess,
    ProgressUpdate,
)
from ragindex import __version__
from registry import configure_registry, reset_registry

from ..utils.config_helpers import args_to_config
from ..utils.output import OutputFormatter, format_duration, format_progress, format_stats
from ..utils.validation import ensure_database_directory, validate_path, validate_provider_args


async def index_command(args: argparse.Namespace) -> None:
    """Execute the index command using the service layer.

    Args:
        args: Parsed command-line arguments
    """
    formatter = OutputFormatter(verbose=args.verbose)

    if not validate_path(args.path, must_exist=True, must_be_dir=True):
        sys.exit(1)

    root = args.path.resolve()
    config = args_to_config(args, project_dir=root)

    if not validate_provider_args(config.get_missing_config(), config.embedding.provider):
        sys.exit(1)
    if not ensure_database_directory(Path(config.database.path)):
        sys.exit(1)

    formatter.info(f"Starting RagIndex v{__version__}")
    formatter.info(f"Processing directory: {root}")
    formatter.info(f"Database: {config.database.path}")
    formatter.verbose_info(f"Embedding: {config.embedding.provider}/{config.get_embedding_model()}")

    registry = configure_registry(config)
    try:
        coordinator = registry.create_indexing_coordinator(root)
        initial_stats = await coordinator.get_stats()
        formatter.verbose_info(f"Initial stats: {format_stats(initial_stats)}")

        def report_progress(update: ProgressUpdate) -> None:
            formatter.verbose_info(
                format_progress(update.processed_files, update.total_files, update.current_file)
            )

        result = await coordinator.index_project(
            force_reindex=args.force,
            on_progress=report_progress,
        )
        final_stats = await coordinator.get_stats()
    finally:
        reset_registry()

    if not _report_result(result, formatter):
        sys.exit(1)
    formatter.info(f"Index now holds {format_stats(final_stats)}")


def _report_result(result: IndexingResult, formatter: OutputFormatter) -> bool:
    """Print the outcome of a run; returns False for anything but success."""
    if isinstance(result, IndexingSuccess):
        formatter.success(
            f"Indexed {result.files_processed} files in {format_duration(result.duration_seconds)}: "
            f"{result.chunks_created} chunks created, {result.files_skipped} unchanged, "
            f"{result.files_removed} removed"
        )
        if result.chunks_failed:
            formatter.warning(f"{result.chunks_failed} chunks failed to embed and will be retried next run")
        return True

    if isinstance(result, IndexingNotReady):
        formatter.error(f"Embedding service not ready: {result.reason}")
    elif isinstance(result, IndexingCancelled):
        formatter.warning(f"Indexing cancelled after {result.files_processed} files")
    elif isinstance(result, IndexingError):
        formatter.error(result.message)
    else:
        logger.error(f"Unexpected indexing result: {result!r}")
    return False
