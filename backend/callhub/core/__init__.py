"""Core - pure parsing, coercion, serialization, domain types and errors (no IO)."""
