"""FastAPI application factory for the Mindsnack cache service.

Creates the application with:
- Cached read endpoints (/cached/articles, /cached/categories, ...)
- Cache revalidation webhook and statistics (/cache/...)
- Upload signing for the admin editor (/uploads/sign)
- Health probes
- Lifecycle management for the upstream HTTP client and response cache
- ORJSON for JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from mindsnack.api.deps import AppState, build_proxies
from mindsnack.api.errors import (
    ApiError,
    api_exception_handler,
    generic_exception_handler,
    upstream_exception_handler,
)
from mindsnack.api.middleware import (
    CachingMiddleware,
    CorrelationMiddleware,
    SecurityHeadersMiddleware,
)
from mindsnack.api.routers import cached, health, revalidate, uploads
from mindsnack.cache import (
    CacheKeys,
    InvalidationRouter,
    LoggingPageRevalidator,
    PageRevalidator,
    ResponseCache,
    UpstreamFetchError,
    WebhookPageRevalidator,
)
from mindsnack.config import Settings
from mindsnack.config import settings as default_settings
from mindsnack.observability import configure_logging

logger = logging.getLogger(__name__)


def build_state(
    settings: Settings,
    client: httpx.AsyncClient,
    page_revalidator: PageRevalidator | None = None,
) -> AppState:
    """Wire the cache, proxies and invalidation router around one client."""
    cache = ResponseCache(
        ttl=settings.cache_ttl_seconds,
        sweep_threshold=settings.cache_sweep_threshold,
    )
    keys = CacheKeys(settings.articles_api_url)

    if page_revalidator is None:
        if settings.page_revalidate_url:
            page_revalidator = WebhookPageRevalidator(
                client, settings.page_revalidate_url, settings.page_revalidate_token
            )
        else:
            page_revalidator = LoggingPageRevalidator()

    return AppState(
        settings=settings,
        http_client=client,
        cache=cache,
        keys=keys,
        proxies=build_proxies(cache, client),
        invalidation=InvalidationRouter(cache, keys, page_revalidator),
    )


def create_app(
    settings: Settings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    page_revalidator: PageRevalidator | None = None,
    setup_logging: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Configuration; the environment-derived settings by default
        http_client: Upstream client to use instead of creating one. The
            caller keeps ownership and closes it.
        page_revalidator: Page-cache collaborator; chosen from settings by default
        setup_logging: Install the application log handlers on startup
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if setup_logging:
            configure_logging(json_format=settings.env != "dev", level=settings.log_level)

        logger.info(f"Starting Mindsnack cache service ({settings.env})")
        owns_client = http_client is None
        client = http_client or httpx.AsyncClient(
            timeout=settings.upstream_timeout,
            follow_redirects=True,
        )

        app.state.mindsnack = build_state(settings, client, page_revalidator)
        logger.info(f"Upstream API: {settings.articles_api_url}")

        try:
            yield
        finally:
            logger.info("Shutting down Mindsnack cache service")
            if owns_client:
                await client.aclose()
            app.state.mindsnack = None

    app = FastAPI(
        title="Mindsnack Books cache",
        description="Read-through cache and revalidation webhook for the Mindsnack Books API",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Correlation innermost so every other layer logs with the request ID
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(
        CachingMiddleware,
        shared_max_age=settings.cache_shared_max_age,
        stale_while_revalidate=settings.cache_stale_while_revalidate,
    )
    if settings.enable_security_headers:
        if settings.csp_policy:
            app.add_middleware(SecurityHeadersMiddleware, csp_policy=settings.csp_policy)
        else:
            app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_exception_handler))
    app.add_exception_handler(
        UpstreamFetchError, cast(ExceptionHandler, upstream_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    app.include_router(cached.router)
    app.include_router(revalidate.router)
    app.include_router(uploads.router)

    return app
