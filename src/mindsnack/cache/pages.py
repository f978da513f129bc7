"""External page-cache revalidation.

Rendered pages (home, article, category) live in a page cache owned by the
rendering front-end. This service can only ask for a path to be marked
stale; the next visit regenerates it.

Two implementations:
- LoggingPageRevalidator: records and logs targets (no page cache wired up)
- WebhookPageRevalidator: POSTs each target to the front-end's revalidation hook
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)


class PageScope(str, Enum):
    """How much of the page tree a revalidation covers."""

    PAGE = "page"  # exactly this path
    LAYOUT = "layout"  # this path and everything under it


@dataclass(frozen=True)
class PageTarget:
    path: str
    scope: PageScope = PageScope.PAGE


class PageRevalidationError(Exception):
    """The page cache refused or failed a revalidation."""


class PageRevalidator(Protocol):
    async def revalidate(self, target: PageTarget) -> None: ...


class LoggingPageRevalidator:
    """Record revalidation targets without contacting anything."""

    def __init__(self) -> None:
        self.revalidated: list[PageTarget] = []

    async def revalidate(self, target: PageTarget) -> None:
        self.revalidated.append(target)
        logger.info(
            f"Page marked stale: {target.path} ({target.scope.value})",
            extra={"page_path": target.path, "page_scope": target.scope.value},
        )


class WebhookPageRevalidator:
    """Forward revalidation targets to an HTTP hook.

    Request body: {"path": "/post/my-slug", "type": "page"}
    """

    def __init__(self, client: httpx.AsyncClient, url: str, token: str | None = None):
        self.client = client
        self.url = url
        self.token = token

    async def revalidate(self, target: PageTarget) -> None:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self.client.post(
                self.url,
                json={"path": target.path, "type": target.scope.value},
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise PageRevalidationError(f"Page cache unreachable: {e}") from e

        if not response.is_success:
            raise PageRevalidationError(
                f"Page cache returned {response.status_code} for {target.path}"
            )
