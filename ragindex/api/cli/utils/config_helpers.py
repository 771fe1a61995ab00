"""
Configuration helper utilities for CLI commands.

This module bridges CLI arguments with the unified configuration system.
"""

import argparse
from pathlib import Path
from typing import Any

from ragindex.core.config import RagIndexConfig


def args_to_config(args: argparse.Namespace, project_dir: Path | None = None) -> RagIndexConfig:
    """
    Convert CLI arguments to unified configuration.

    Arguments left unset keep the values from config files and environment.

    Args:
        args: Parsed CLI arguments
        project_dir: Project directory for config file loading

    Returns:
        RagIndexConfig instance
    """
    config_overrides: dict[str, Any] = {}

    # Database configuration
    if getattr(args, 'db', None):
        config_overrides['database'] = {'path': str(args.db)}

    # Embedding configuration
    embedding_config = {}
    if getattr(args, 'provider', None):
        embedding_config['provider'] = args.provider
    if getattr(args, 'model', None):
        embedding_config['model'] = args.model
    if getattr(args, 'api_key', None):
        embedding_config['api_key'] = args.api_key
    if getattr(args, 'base_url', None):
        embedding_config['base_url'] = args.base_url

    if embedding_config:
        config_overrides['embedding'] = embedding_config

    # Indexing configuration
    if getattr(args, 'include_ext', None):
        config_overrides['indexing'] = {'include_extensions': args.include_ext}

    config = RagIndexConfig.load_hierarchical(project_dir=project_dir, **config_overrides)

    # Excluded directories extend the configured ones
    if getattr(args, 'exclude_dir', None):
        config.indexing.exclude_dirs = list(config.indexing.exclude_dirs) + list(args.exclude_dir)

    if getattr(args, 'verbose', False):
        config.debug = True

    return config
