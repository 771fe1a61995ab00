"""RagIndex test package."""
