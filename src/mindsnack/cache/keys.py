"""Cache key schema for the response cache.

A cache key is the fully-qualified upstream request URL, query string
included, so every distinct filter gets its own entry:

    https://snackmachine.onrender.com/api/articles
    https://snackmachine.onrender.com/api/articles?category=Essays
    https://snackmachine.onrender.com/api/articles/my-slug

Query parameters are sorted by name so the same request always maps to
the same key. Families (every key of one resource type) are addressed by
literal substring, see ``ResponseCache.delete_by_pattern``.
"""

from __future__ import annotations

from typing import Literal
from urllib.parse import quote, urlencode

Resource = Literal["articles", "categories", "editor-notes"]

RESOURCES: tuple[Resource, ...] = ("articles", "categories", "editor-notes")


class CacheKeys:
    """Cache key generator bound to one upstream base URL."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def url(self, path: str, params: dict[str, str | None] | None = None) -> str:
        """Canonical URL for ``path`` with a stable query string."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        if params:
            present = sorted((k, v) for k, v in params.items() if v is not None)
            if present:
                url = f"{url}?{urlencode(present, quote_via=quote)}"
        return url

    def articles(self, category: str | None = None) -> str:
        """Key for the article list, optionally filtered by category."""
        return self.url("articles", {"category": category or None})

    def article(self, slug: str) -> str:
        """Key for a single article."""
        return self.url(f"articles/{quote(slug, safe='')}")

    def categories(self, slug: str | None = None) -> str:
        """Key for the category list or a single category."""
        if slug:
            return self.url(f"categories/{quote(slug, safe='')}")
        return self.url("categories")

    def editor_notes(self) -> str:
        """Key for the editor notes collection."""
        return self.url("editor-notes")

    # ------------------------------------------------------------------
    # Family patterns
    # ------------------------------------------------------------------

    def articles_family(self) -> str:
        """Matches every article list variant and every article detail."""
        return f"{self.base_url}/articles"

    def categories_family(self) -> str:
        return f"{self.base_url}/categories"

    def editor_notes_family(self) -> str:
        return f"{self.base_url}/editor-notes"

    def parse_key(self, key: str) -> tuple[Resource, str | None] | None:
        """Split a key into (resource, identifier).

        The identifier is the path segment after the resource, or None for
        collection keys. Returns None for keys outside this base URL.
        """
        prefix = f"{self.base_url}/"
        if not key.startswith(prefix):
            return None

        path = key[len(prefix) :].split("?", 1)[0]
        parts = path.split("/", 1)
        resource = parts[0]
        if resource not in RESOURCES:
            return None

        identifier = parts[1] if len(parts) > 1 and parts[1] else None
        return resource, identifier  # type: ignore[return-value]
