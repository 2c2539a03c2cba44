"""Core infrastructure: configuration sources and time helpers."""
