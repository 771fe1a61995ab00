"""Stats command module - reports index contents and embedding readiness."""

import argparse

from core.models import IndexStats
from registry import configure_registry, reset_registry

from ..utils.config_helpers import args_to_config
from ..utils.output import OutputFormatter, format_timestamp


async def stats_command(args: argparse.Namespace) -> None:
    """Execute the stats command.

    Args:
        args: Parsed command-line arguments
    """
    formatter = OutputFormatter(verbose=args.verbose)
    config = args_to_config(args)

    registry = configure_registry(config)
    try:
        if config.is_fully_configured():
            stats = await registry.create_search_service().index_status()
        else:
            # Without a usable provider only the store can be described
            store = registry.get_vector_store()
            store_stats = store.get_stats()
            stats = IndexStats(
                total_chunks=store_stats["chunks"],
                indexed_files=sorted(fp.path for fp in store.list_fingerprints()),
                last_index_time=store_stats["last_index_time"],
                ready=False,
            )
    finally:
        reset_registry()

    if args.json:
        formatter.json_output(stats.to_dict())
        return

    formatter.info(f"Chunks: {stats.total_chunks}")
    formatter.info(f"Files: {len(stats.indexed_files)}")
    formatter.info(f"Last indexed: {format_timestamp(stats.last_index_time)}")
    if stats.ready:
        formatter.success(f"Embedding service ready ({config.embedding.provider}/{config.get_embedding_model()})")
    else:
        formatter.warning(f"Embedding service not ready ({config.embedding.provider})")
    for path in stats.indexed_files:
        formatter.verbose_info(path)
