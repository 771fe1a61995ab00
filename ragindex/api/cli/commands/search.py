"""Search command module - retrieves chunks similar to a query."""

import argparse
import sys

from core.exceptions import NotReadyError
from core.models import RetrievalResult
from registry import configure_registry, reset_registry

from ..utils.config_helpers import args_to_config
from ..utils.output import OutputFormatter, preview
from ..utils.validation import validate_provider_args, validate_search_args


async def search_command(args: argparse.Namespace) -> None:
    """Execute the search command.

    Args:
        args: Parsed command-line arguments
    """
    formatter = OutputFormatter(verbose=args.verbose)

    if not validate_search_args(args.k, args.min_similarity):
        sys.exit(1)

    config = args_to_config(args)
    if not validate_provider_args(config.get_missing_config(), config.embedding.provider):
        sys.exit(1)

    retrieval = config.retrieval
    k = args.k or retrieval.default_k
    min_similarity = args.min_similarity if args.min_similarity is not None else retrieval.min_similarity
    rerank = args.rerank or retrieval.rerank

    registry = configure_registry(config)
    try:
        search_service = registry.create_search_service()
        result = await search_service.retrieve(
            args.query, k, min_similarity=min_similarity, rerank=rerank
        )
    except NotReadyError as e:
        formatter.error(str(e))
        sys.exit(1)
    finally:
        reset_registry()

    if args.json:
        formatter.json_output(result.to_dict())
    else:
        _print_hits(result, formatter)


def _print_hits(result: RetrievalResult, formatter: OutputFormatter) -> None:
    if result.is_empty:
        formatter.info("No matching chunks")
        return

    for rank, hit in enumerate(result.hits, start=1):
        print(f"{rank}. {hit.file_path}#{hit.record.sequence_index}  score={hit.score:.4f}")
        print(f"   {preview(hit.chunk_text)}")
