"""Tests for the revalidation webhook and cache statistics."""

from __future__ import annotations

from fastapi.testclient import TestClient

from mindsnack.cache import LoggingPageRevalidator, PageScope, PageTarget
from tests.conftest import AUTH, BASE_URL, FakeUpstream

ARTICLE = {"slug": "on-reading", "title": "On Reading"}


def _warm(client: TestClient, upstream: FakeUpstream) -> None:
    upstream.add(f"{BASE_URL}/articles", [ARTICLE])
    upstream.add(f"{BASE_URL}/articles/on-reading", ARTICLE)
    upstream.add(f"{BASE_URL}/categories", [{"name": "Essays"}])
    upstream.add(f"{BASE_URL}/editor-notes", [{"text": "hi"}])
    for path in (
        "/cached/articles",
        "/cached/articles/on-reading",
        "/cached/categories",
        "/cached/editor-notes",
    ):
        assert client.get(path).status_code == 200


class TestAuthorization:
    def test_missing_header_rejected(self, client: TestClient) -> None:
        response = client.post("/cache/revalidate", json={"type": "all"})

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_wrong_secret_has_no_effect(
        self,
        client: TestClient,
        upstream: FakeUpstream,
        pages: LoggingPageRevalidator,
    ) -> None:
        _warm(client, upstream)

        response = client.post(
            "/cache/revalidate",
            json={"type": "all"},
            headers={"Authorization": "Bearer wrong"},
        )

        assert response.status_code == 401
        assert client.get("/cached/articles").headers["x-cache"] == "HIT"
        assert pages.revalidated == []

    def test_scheme_must_be_bearer(self, client: TestClient) -> None:
        response = client.post(
            "/cache/revalidate",
            json={"type": "all"},
            headers={"Authorization": "test-secret"},
        )
        assert response.status_code == 401

    def test_stats_requires_secret(self, client: TestClient) -> None:
        assert client.get("/cache/stats").status_code == 401


class TestRevalidate:
    def test_article(
        self,
        client: TestClient,
        upstream: FakeUpstream,
        pages: LoggingPageRevalidator,
    ) -> None:
        _warm(client, upstream)

        response = client.post(
            "/cache/revalidate",
            json={"type": "article", "slug": "on-reading", "category": "Essays"},
            headers=AUTH,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["revalidated"] is True
        assert body["message"] == "Cache invalidated successfully"
        assert body["type"] == "article"
        assert "timestamp" in body
        assert response.headers["cache-control"] == "no-store"

        assert client.get("/cached/articles/on-reading").headers["x-cache"] == "MISS"
        assert client.get("/cached/articles").headers["x-cache"] == "MISS"
        assert client.get("/cached/categories").headers["x-cache"] == "HIT"
        assert PageTarget("/post/on-reading") in pages.revalidated
        assert PageTarget("/category/Essays") in pages.revalidated

    def test_category(self, client: TestClient, upstream: FakeUpstream) -> None:
        _warm(client, upstream)

        client.post("/cache/revalidate", json={"type": "category"}, headers=AUTH)

        assert client.get("/cached/categories").headers["x-cache"] == "MISS"
        assert client.get("/cached/articles").headers["x-cache"] == "MISS"
        assert client.get("/cached/editor-notes").headers["x-cache"] == "HIT"

    def test_editor_note(self, client: TestClient, upstream: FakeUpstream) -> None:
        _warm(client, upstream)

        client.post("/cache/revalidate", json={"type": "editor-note"}, headers=AUTH)

        assert client.get("/cached/editor-notes").headers["x-cache"] == "MISS"
        assert client.get("/cached/articles").headers["x-cache"] == "HIT"

    def test_all(
        self,
        client: TestClient,
        upstream: FakeUpstream,
        pages: LoggingPageRevalidator,
    ) -> None:
        _warm(client, upstream)

        client.post("/cache/revalidate", json={"type": "all"}, headers=AUTH)

        assert len(client.app.state.mindsnack.cache) == 0
        assert PageTarget("/", PageScope.LAYOUT) in pages.revalidated

    def test_article_without_slug_is_rejected(self, client: TestClient) -> None:
        response = client.post("/cache/revalidate", json={"type": "article"}, headers=AUTH)
        assert response.status_code == 422

    def test_unknown_type_is_rejected(self, client: TestClient) -> None:
        response = client.post("/cache/revalidate", json={"type": "author"}, headers=AUTH)
        assert response.status_code == 422


class TestStats:
    def test_counts(self, client: TestClient, upstream: FakeUpstream) -> None:
        _warm(client, upstream)
        client.get("/cached/articles")

        response = client.get("/cache/stats", headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["entries"] == 4
        assert body["hits"] == 1
        assert body["misses"] == 4
        assert body["hit_ratio"] == 0.2
        assert body["ttl_seconds"] == 86400
        assert body["by_resource"] == {"articles": 2, "categories": 1, "editor-notes": 1}
