"""HTTP API for the Mindsnack cache service."""
