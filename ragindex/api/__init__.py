"""External interfaces for RagIndex."""
