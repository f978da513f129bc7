"""Targeted cache invalidation after admin writes.

Admin flows write straight to the upstream API and then report what they
changed. The router turns that report into two sets of actions:

- purges against the in-process ResponseCache (exact keys, substring
  families, or a full clear)
- page revalidations against the external page cache

List resources are cached under one key per query-string variant and the
variants are not tracked, so a change to any article purges the whole
article family. Over-invalidation is the price of never serving a stale
list.

Every action runs independently. A failing action is logged and recorded
in the outcome; it never stops the remaining actions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mindsnack.cache.keys import CacheKeys
from mindsnack.cache.pages import PageRevalidator, PageScope, PageTarget
from mindsnack.cache.store import ResponseCache

logger = logging.getLogger(__name__)


class InvalidationType(str, Enum):
    """What kind of entity was changed."""

    ARTICLE = "article"
    CATEGORY = "category"
    EDITOR_NOTE = "editor-note"
    ALL = "all"


class InvalidationRequest(BaseModel):
    """Body of POST /cache/revalidate."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: InvalidationType = Field(alias="type")
    slug: str | None = None
    category: str | None = None

    @field_validator("slug", "category")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
        return v or None

    @model_validator(mode="after")
    def require_article_slug(self) -> "InvalidationRequest":
        if self.kind == InvalidationType.ARTICLE and self.slug is None:
            raise ValueError("slug is required when type is 'article'")
        return self


@dataclass
class InvalidationPlan:
    """Actions derived from one InvalidationRequest."""

    clear_all: bool = False
    keys: list[str] = field(default_factory=list)
    patterns: list[str] = field(default_factory=list)
    pages: list[PageTarget] = field(default_factory=list)


@dataclass
class InvalidationOutcome:
    kind: InvalidationType
    keys_deleted: int = 0
    entries_removed: int = 0
    pages_revalidated: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures


class InvalidationRouter:
    """Map change reports to cache purges and page revalidations."""

    def __init__(self, cache: ResponseCache, keys: CacheKeys, pages: PageRevalidator):
        self.cache = cache
        self.keys = keys
        self.pages = pages

    def plan(self, request: InvalidationRequest) -> InvalidationPlan:
        """Pure mapping from request to actions; touches nothing."""
        kind = request.kind

        if kind == InvalidationType.ARTICLE:
            slug = cast(str, request.slug)
            pages = [
                PageTarget(f"/post/{slug}"),
                PageTarget("/"),
            ]
            if request.category:
                pages.append(PageTarget(f"/category/{request.category}"))
            pages.append(PageTarget("/category", PageScope.LAYOUT))
            return InvalidationPlan(
                keys=[self.keys.article(slug)],
                patterns=[self.keys.articles_family()],
                pages=pages,
            )

        if kind == InvalidationType.CATEGORY:
            return InvalidationPlan(
                patterns=[self.keys.categories_family(), self.keys.articles_family()],
                pages=[PageTarget("/category", PageScope.LAYOUT), PageTarget("/")],
            )

        if kind == InvalidationType.EDITOR_NOTE:
            return InvalidationPlan(
                patterns=[self.keys.editor_notes_family()],
                pages=[PageTarget("/")],
            )

        return InvalidationPlan(
            clear_all=True,
            pages=[
                PageTarget("/", PageScope.LAYOUT),
                PageTarget("/category", PageScope.LAYOUT),
                PageTarget("/post", PageScope.LAYOUT),
            ],
        )

    async def apply(self, request: InvalidationRequest) -> InvalidationOutcome:
        """Run every planned action, best-effort."""
        plan = self.plan(request)
        outcome = InvalidationOutcome(kind=request.kind)

        if plan.clear_all:
            try:
                outcome.entries_removed += self.cache.clear()
            except Exception as e:
                self._record_failure(outcome, "clear", e)

        for key in plan.keys:
            try:
                if self.cache.delete_key(key):
                    outcome.keys_deleted += 1
                    logger.info(f"Cleared cache for {key}", extra={"cache_key": key})
            except Exception as e:
                self._record_failure(outcome, f"delete {key}", e)

        for pattern in plan.patterns:
            try:
                outcome.entries_removed += self.cache.delete_by_pattern(pattern)
            except Exception as e:
                self._record_failure(outcome, f"pattern {pattern}", e)

        for target in plan.pages:
            try:
                await self.pages.revalidate(target)
                outcome.pages_revalidated += 1
            except Exception as e:
                self._record_failure(outcome, f"page {target.path}", e)

        logger.info(
            f"Invalidated {request.kind.value}",
            extra={
                "invalidation_type": request.kind.value,
                "slug": request.slug,
                "keys_deleted": outcome.keys_deleted,
                "entries_removed": outcome.entries_removed,
                "pages_revalidated": outcome.pages_revalidated,
                "failures": len(outcome.failures),
            },
        )
        return outcome

    @staticmethod
    def _record_failure(outcome: InvalidationOutcome, action: str, exc: Exception) -> None:
        outcome.failures.append(action)
        logger.error(
            f"Invalidation action failed: {action}: {exc}",
            extra={"invalidation_type": outcome.kind.value, "action": action},
        )
