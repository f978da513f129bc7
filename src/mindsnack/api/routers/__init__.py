"""API routers."""

from mindsnack.api.routers import cached, health, revalidate, uploads

__all__ = ["cached", "health", "revalidate", "uploads"]
