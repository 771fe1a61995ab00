"""
File discovery for RagIndex.

Walks a project tree and returns the files to index. Which files are
skipped is decided by an ignore predicate: any callable taking a Path and
returning True for paths to skip. The predicate is consulted for
directories (to prune whole subtrees) and for files. IgnoreRules is the
default predicate, built from the indexing configuration.
"""

import os
from collections.abc import Callable, Iterable
from fnmatch import fnmatch
from pathlib import Path
from typing import Optional

from loguru import logger

IgnorePredicate = Callable[[Path], bool]

DEFAULT_INCLUDE_EXTENSIONS = frozenset({
    "kt", "kts", "java", "py", "md", "txt", "yml", "yaml", "json", "xml", "properties",
})

DEFAULT_EXCLUDE_DIRS = frozenset({
    "build", ".gradle", ".git", ".idea", "out", "target", "node_modules",
    ".kotlin", "bin", "generated", "__pycache__", ".venv", "venv", ".ragindex",
})

BINARY_SNIFF_BYTES = 8192


class IgnoreRules:
    """Default ignore predicate: extension allow-list, excluded directories,
    glob patterns, a size cap and binary sniffing."""

    def __init__(
        self,
        root: Optional[Path] = None,
        include_extensions: Optional[Iterable[str]] = None,
        exclude_dirs: Optional[Iterable[str]] = None,
        exclude_patterns: Optional[Iterable[str]] = None,
        max_file_size_bytes: Optional[int] = None,
        skip_binary: bool = True,
    ):
        """Initialize ignore rules.

        Args:
            root: Project root; glob patterns are matched against paths relative to it
            include_extensions: Extensions to index (without dot); empty means all
            exclude_dirs: Directory names pruned anywhere in the tree
            exclude_patterns: fnmatch patterns for paths to skip
            max_file_size_bytes: Files larger than this are skipped
            skip_binary: Skip files whose first bytes contain NUL
        """
        self.root = root.resolve() if root else None
        self.include_extensions = frozenset(
            ext.lower().lstrip(".")
            for ext in (DEFAULT_INCLUDE_EXTENSIONS if include_extensions is None else include_extensions)
        )
        self.exclude_dirs = frozenset(DEFAULT_EXCLUDE_DIRS if exclude_dirs is None else exclude_dirs)
        self.exclude_patterns = list(exclude_patterns or [])
        self.max_file_size_bytes = max_file_size_bytes
        self.skip_binary = skip_binary

    @classmethod
    def from_config(cls, indexing_config, root: Optional[Path] = None) -> "IgnoreRules":
        """Build rules from an IndexingConfig section."""
        return cls(
            root=root,
            include_extensions=indexing_config.include_extensions,
            exclude_dirs=indexing_config.exclude_dirs,
            exclude_patterns=indexing_config.exclude_patterns,
            max_file_size_bytes=indexing_config.max_file_size_bytes,
        )

    def __call__(self, path: Path) -> bool:
        if path.is_dir():
            return path.name in self.exclude_dirs or self._matches_pattern(path)
        return self.ignores_file(path)

    def ignores_file(self, path: Path) -> bool:
        extension = path.suffix.lower().lstrip(".")
        if self.include_extensions and extension not in self.include_extensions:
            return True
        if self._matches_pattern(path):
            return True
        try:
            if self.max_file_size_bytes is not None and path.stat().st_size > self.max_file_size_bytes:
                logger.debug(f"Skipping {path}: larger than {self.max_file_size_bytes} bytes")
                return True
            if self.skip_binary and _looks_binary(path):
                logger.debug(f"Skipping binary file: {path}")
                return True
        except OSError as e:
            # Unreadable files are reported by the indexer, not silently dropped here.
            logger.debug(f"Could not inspect {path}: {e}")
        return False

    def _matches_pattern(self, path: Path) -> bool:
        if not self.exclude_patterns:
            return False
        candidates = [str(path), path.name]
        if self.root is not None:
            try:
                candidates.append(path.resolve().relative_to(self.root).as_posix())
            except ValueError:
                pass
        return any(fnmatch(c, pattern) for c in candidates for pattern in self.exclude_patterns)


def _looks_binary(path: Path) -> bool:
    with open(path, "rb") as handle:
        return b"\x00" in handle.read(BINARY_SNIFF_BYTES)


def discover_files(root: Path, ignore: Optional[IgnorePredicate] = None) -> list[Path]:
    """Return the files under `root` that the predicate does not ignore.

    Results are sorted by their POSIX path relative to root. Subdirectories
    that cannot be listed are logged and skipped.

    Raises:
        FileNotFoundError: If root does not exist
        NotADirectoryError: If root is not a directory
    """
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"Project root does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Project root is not a directory: {root}")
    # Listing the root itself must succeed; only nested failures are tolerated.
    os.listdir(root)

    ignore = ignore or IgnoreRules(root=root)

    def on_error(error: OSError) -> None:
        logger.warning(f"Cannot list directory {error.filename}: {error.strerror}")

    files = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        current = Path(dirpath)
        dirnames[:] = sorted(d for d in dirnames if not ignore(current / d))
        for name in filenames:
            path = current / name
            if path.is_file() and not ignore(path):
                files.append(path)

    return sorted(files, key=lambda p: relative_key(root, p))


def relative_key(root: Path, path: Path) -> str:
    """Project-relative POSIX path used as a file's identity in the index."""
    return path.relative_to(root).as_posix()
