"""Application-level core for RagIndex (configuration)."""
