"""Mindsnack Books: read-through cache and revalidation service."""

__version__ = "0.1.0"
