"""RagIndex - Incremental file indexing and similarity retrieval for grounding LLM prompts."""

__version__ = "0.3.0"
__description__ = "Incremental file indexing and similarity retrieval for grounding LLM prompts"

# Import modules only when needed to avoid loading provider dependencies eagerly
__all__ = [
    "TextChunker",
    "IgnoreRules",
    "RagIndexConfig",
]


def __getattr__(name: str):
    """Lazy import of the public entry points."""
    if name == "TextChunker":
        from .chunker import TextChunker
        return TextChunker
    elif name == "IgnoreRules":
        from .file_discovery import IgnoreRules
        return IgnoreRules
    elif name == "RagIndexConfig":
        from .core.config import RagIndexConfig
        return RagIndexConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
