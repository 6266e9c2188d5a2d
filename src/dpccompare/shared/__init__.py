"""Shared building blocks: errors, structured logging and constants."""
