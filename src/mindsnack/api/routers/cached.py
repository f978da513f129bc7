"""Cached read endpoints for the public site.

Each endpoint returns the upstream JSON body verbatim with an ``X-Cache``
header (HIT or MISS). Cache-Control is added by CachingMiddleware.

- GET /cached/articles?category=<name>
- GET /cached/articles/{slug}
- GET /cached/categories[?slug=<slug>]
- GET /cached/editor-notes
"""

from __future__ import annotations

from fastapi import APIRouter, Path, Query, Response

from mindsnack.api.deps import StateDep
from mindsnack.cache.proxy import ProxyResult

router = APIRouter(prefix="/cached", tags=["cached"])


def _cached_response(result: ProxyResult) -> Response:
    return Response(
        content=result.body,
        media_type="application/json",
        headers={"X-Cache": result.cache_status},
    )


@router.get("/articles")
async def get_articles(
    state: StateDep,
    category: str | None = Query(default=None, description="Only articles in this category"),
) -> Response:
    """Article list, optionally filtered by category."""
    url = state.keys.articles(category)
    return _cached_response(await state.proxies.articles.fetch(url))


@router.get("/articles/{slug}")
async def get_article(
    state: StateDep,
    slug: str = Path(description="Article slug"),
) -> Response:
    """Single article by slug."""
    url = state.keys.article(slug)
    return _cached_response(await state.proxies.article.fetch(url))


@router.get("/categories")
async def get_categories(
    state: StateDep,
    slug: str | None = Query(default=None, description="Return only this category"),
) -> Response:
    """Category list, or a single category when ``slug`` is given."""
    url = state.keys.categories(slug)
    return _cached_response(await state.proxies.categories.fetch(url))


@router.get("/editor-notes")
async def get_editor_notes(state: StateDep) -> Response:
    """Editor notes shown on the home page."""
    url = state.keys.editor_notes()
    return _cached_response(await state.proxies.editor_notes.fetch(url))
