"""Core models, validation and serialization."""
