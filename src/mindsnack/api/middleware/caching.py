"""HTTP caching headers middleware.

Cached reads are advertised to shared caches (CDN, reverse proxy) for the
same lifetime as the in-process cache, with stale-while-revalidate so a
stale copy can be served while a fresh one is fetched.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

CACHED_PREFIX = "/cached/"


class CachingMiddleware(BaseHTTPMiddleware):
    """Add Cache-Control and Vary headers based on the endpoint."""

    def __init__(
        self,
        app: ASGIApp,
        shared_max_age: int = 86400,
        stale_while_revalidate: int = 86400,
    ):
        super().__init__(app)
        self.shared_max_age = shared_max_age
        self.stale_while_revalidate = stale_while_revalidate

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        if "cache-control" in response.headers:
            return response

        cache_control = self._get_cache_control(request, response)
        if cache_control:
            response.headers["Cache-Control"] = cache_control

        if request.url.path.startswith(CACHED_PREFIX):
            response.headers["Vary"] = "Accept-Encoding"

        return response

    def _get_cache_control(self, request: Request, response: Response) -> str | None:
        path = request.url.path

        if path.startswith("/health"):
            return "no-cache, no-store, must-revalidate"

        # Revalidation, stats and signatures must never be replayed
        if path.startswith("/cache/") or path.startswith("/uploads/"):
            return "no-store"

        if path.startswith(CACHED_PREFIX):
            # Upstream errors are never cached, here or downstream
            if request.method != "GET" or response.status_code >= 400:
                return "no-store"
            return (
                f"public, s-maxage={self.shared_max_age}, "
                f"stale-while-revalidate={self.stale_while_revalidate}"
            )

        return None
