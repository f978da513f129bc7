"""Middleware for the Mindsnack API.

- HTTP caching headers for cached reads
- Security headers
- Correlation context for request logging
"""

from mindsnack.api.middleware.caching import CachingMiddleware
from mindsnack.api.middleware.correlation import CorrelationMiddleware
from mindsnack.api.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "CachingMiddleware",
    "CorrelationMiddleware",
    "SecurityHeadersMiddleware",
]
