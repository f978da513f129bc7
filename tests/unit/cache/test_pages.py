"""Tests for page-cache revalidators."""

from __future__ import annotations

import httpx
import orjson
import pytest

from mindsnack.cache import (
    LoggingPageRevalidator,
    PageRevalidationError,
    PageScope,
    PageTarget,
    WebhookPageRevalidator,
)

HOOK = "https://site.test/api/revalidate"


class TestLoggingPageRevalidator:
    @pytest.mark.asyncio
    async def test_records_targets(self) -> None:
        pages = LoggingPageRevalidator()
        await pages.revalidate(PageTarget("/"))
        await pages.revalidate(PageTarget("/category", PageScope.LAYOUT))

        assert pages.revalidated == [
            PageTarget("/", PageScope.PAGE),
            PageTarget("/category", PageScope.LAYOUT),
        ]


class TestWebhookPageRevalidator:
    @pytest.mark.asyncio
    async def test_posts_path_and_scope_with_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"revalidated": True})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            hook = WebhookPageRevalidator(client, HOOK, token="page-token")
            await hook.revalidate(PageTarget("/category", PageScope.LAYOUT))

        assert len(seen) == 1
        assert str(seen[0].url) == HOOK
        assert seen[0].headers["authorization"] == "Bearer page-token"
        assert orjson.loads(seen[0].content) == {"path": "/category", "type": "layout"}

    @pytest.mark.asyncio
    async def test_no_token_no_auth_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await WebhookPageRevalidator(client, HOOK).revalidate(PageTarget("/"))

        assert "authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_error_status_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(PageRevalidationError):
                await WebhookPageRevalidator(client, HOOK).revalidate(PageTarget("/"))

    @pytest.mark.asyncio
    async def test_unreachable_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(PageRevalidationError):
                await WebhookPageRevalidator(client, HOOK).revalidate(PageTarget("/"))
