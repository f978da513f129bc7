"""Admin write client.

Admin flows write straight to the upstream API (the cache is never in the
write path) and then ask the cache service to revalidate. Revalidation is
best-effort: by the time it runs the write has already succeeded, so a
failed revalidation is logged and the caller still gets the upstream
result.

Usage:
    async with httpx.AsyncClient() as http:
        admin = AdminClient(
            api_url="https://snackmachine.onrender.com/api",
            revalidate_url="https://mindsnack.example/cache/revalidate",
            secret=settings.revalidate_secret,
            client=http,
        )
        await admin.save_article(ArticleDraft(title="On Reading", categories=["Essays"]))
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx
import orjson
from pydantic import BaseModel, field_validator

from mindsnack.cache.invalidation import InvalidationRequest, InvalidationType

logger = logging.getLogger(__name__)

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Lowercase the title and collapse every run of other characters to '-'."""
    return _SLUG_SEPARATORS.sub("-", title.lower())


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class AdminApiError(Exception):
    """The upstream API rejected a write."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{message} (status {status_code})")


class ArticleDraft(BaseModel):
    """Article as edited in the admin form."""

    title: str
    subtitle: str = ""
    author: str = ""
    publication_date: str = ""
    original_publication: str = ""
    content: str = ""
    featured_image: str | None = None
    tags: list[str] = []
    categories: list[str] = []
    status: str = "published"

    @field_validator("tags", "categories", mode="before")
    @classmethod
    def split_comma_separated(cls, v: Any) -> Any:
        return _split_csv(v)

    @property
    def slug(self) -> str:
        return slugify(self.title)

    def to_payload(self) -> dict[str, Any]:
        """Request body expected by POST/PUT /articles."""
        featured = (
            {"url": self.featured_image, "alt": self.title, "title": self.title}
            if self.featured_image
            else None
        )
        return {
            "article": {
                "title": self.title,
                "subtitle": self.subtitle,
                "slug": self.slug,
                "meta": {
                    "publication_date": self.publication_date,
                    "original_publication": self.original_publication,
                    "author": self.author,
                    "status": self.status,
                },
                "content": self.content,
                "media": {"featured_image": featured},
                "tags": self.tags,
                "categories": self.categories,
            }
        }


class AdminClient:
    """Upstream writes followed by cache revalidation."""

    def __init__(
        self,
        api_url: str,
        revalidate_url: str,
        secret: str,
        client: httpx.AsyncClient,
    ):
        self.api_url = api_url.rstrip("/")
        self.revalidate_url = revalidate_url
        self.secret = secret
        self.client = client

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    async def save_article(self, draft: ArticleDraft, slug: str | None = None) -> Any:
        """Create (no ``slug``) or update the article at ``slug``."""
        if slug:
            result = await self._send("PUT", f"/articles/{slug}", draft.to_payload())
        else:
            result = await self._send("POST", "/articles", draft.to_payload())

        category = draft.categories[0] if draft.categories else None
        await self.revalidate(InvalidationType.ARTICLE, slug=draft.slug, category=category)
        if slug and slug != draft.slug:
            # Title change moved the article; the old URL is stale too
            await self.revalidate(InvalidationType.ARTICLE, slug=slug, category=category)
        return result

    async def delete_article(self, slug: str, category: str | None = None) -> None:
        await self._send("DELETE", f"/articles/{slug}")
        await self.revalidate(InvalidationType.ARTICLE, slug=slug, category=category)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def create_category(self, data: dict[str, Any]) -> Any:
        result = await self._send("POST", "/categories", data)
        await self.revalidate(InvalidationType.CATEGORY)
        return result

    async def update_category(self, slug: str, data: dict[str, Any]) -> Any:
        result = await self._send("PUT", f"/categories/{slug}", data)
        await self.revalidate(InvalidationType.CATEGORY)
        return result

    async def delete_category(self, slug: str) -> None:
        await self._send("DELETE", f"/categories/{slug}")
        await self.revalidate(InvalidationType.CATEGORY)

    async def set_category_image(self, slug: str, image_url: str) -> Any:
        """Point a category's default image at an uploaded file."""
        return await self.update_category(
            slug, {"defaultImage": {"url": image_url, "alt": "Category default image"}}
        )

    # ------------------------------------------------------------------
    # Editor notes
    # ------------------------------------------------------------------

    async def create_editor_note(self, data: dict[str, Any]) -> Any:
        result = await self._send("POST", "/editor-notes", data)
        await self.revalidate(InvalidationType.EDITOR_NOTE)
        return result

    # ------------------------------------------------------------------
    # Revalidation
    # ------------------------------------------------------------------

    async def revalidate(
        self,
        kind: InvalidationType | str,
        slug: str | None = None,
        category: str | None = None,
    ) -> bool:
        """Ask the cache service to invalidate. Returns False on any failure."""
        request = InvalidationRequest(type=InvalidationType(kind), slug=slug, category=category)
        body = request.model_dump(by_alias=True, exclude_none=True, mode="json")

        try:
            response = await self.client.post(
                self.revalidate_url,
                json=body,
                headers={"Authorization": f"Bearer {self.secret}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Error revalidating cache: {e}", extra={"invalidation_type": body["type"]})
            return False

        if not response.is_success:
            logger.error(
                f"Cache revalidation returned {response.status_code}",
                extra={"invalidation_type": body["type"], "status_code": response.status_code},
            )
            return False
        return True

    async def _send(self, method: str, path: str, payload: Any = None) -> Any:
        try:
            response = await self.client.request(
                method,
                f"{self.api_url}{path}",
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise AdminApiError(503, f"Upstream API unreachable: {e}") from e

        text = response.text
        data: Any = None
        if text.strip():
            try:
                data = orjson.loads(response.content)
            except orjson.JSONDecodeError:
                data = None

        if not response.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            raise AdminApiError(response.status_code, message or text or "Upstream write failed")

        return data
