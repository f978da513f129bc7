"""Shared FastAPI dependencies.

The cache, proxies and invalidation router are built once per application
(see ``mindsnack.api.app.lifespan``), kept on ``app.state`` and handed to
handlers through these dependencies. Nothing is module-global.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Annotated

import httpx
from fastapi import Depends, Header, Request

from mindsnack.api.errors import UnauthorizedError
from mindsnack.cache import CacheKeys, InvalidationRouter, ReadThroughProxy, ResponseCache
from mindsnack.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class ReadProxies:
    """One read-through proxy per upstream collection."""

    articles: ReadThroughProxy
    article: ReadThroughProxy
    categories: ReadThroughProxy
    editor_notes: ReadThroughProxy


@dataclass
class AppState:
    settings: Settings
    http_client: httpx.AsyncClient
    cache: ResponseCache
    keys: CacheKeys
    proxies: ReadProxies
    invalidation: InvalidationRouter


def build_proxies(cache: ResponseCache, client: httpx.AsyncClient) -> ReadProxies:
    return ReadProxies(
        articles=ReadThroughProxy("articles", cache, client, "Failed to fetch articles"),
        article=ReadThroughProxy("article", cache, client, "Article not found"),
        categories=ReadThroughProxy("categories", cache, client, "Failed to fetch categories"),
        editor_notes=ReadThroughProxy(
            "editor-notes", cache, client, "Failed to fetch editor notes"
        ),
    )


def get_state(request: Request) -> AppState:
    """FastAPI dependency returning the per-application state."""
    return request.app.state.mindsnack


StateDep = Annotated[AppState, Depends(get_state)]


def bearer_matches(authorization: str | None, secret: str) -> bool:
    """Compare a full ``Authorization`` header against ``Bearer <secret>``."""
    if not authorization:
        return False
    return hmac.compare_digest(authorization.encode(), f"Bearer {secret}".encode())


def require_revalidate_secret(
    state: StateDep,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request before any side effect unless the secret matches."""
    if not bearer_matches(authorization, state.settings.revalidate_secret):
        logger.warning("Rejected cache request with invalid credentials")
        raise UnauthorizedError()
