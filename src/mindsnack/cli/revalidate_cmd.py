"""CLI command for triggering cache revalidation.

Usage:
    mindsnack revalidate all
    mindsnack revalidate article --slug on-reading --category essays
    mindsnack revalidate category --url https://mindsnack.example/cache/revalidate
"""

from __future__ import annotations

import asyncio
import uuid

import httpx
import typer

from mindsnack.admin import AdminClient
from mindsnack.cache.invalidation import InvalidationType
from mindsnack.config import settings
from mindsnack.observability.logging import LogContext

app = typer.Typer(help="Invalidate cached responses and rendered pages")


async def _revalidate(
    url: str,
    secret: str,
    kind: InvalidationType,
    slug: str | None,
    category: str | None,
) -> bool:
    async with httpx.AsyncClient(timeout=settings.upstream_timeout) as client:
        admin = AdminClient(
            api_url=settings.articles_api_url,
            revalidate_url=url,
            secret=secret,
            client=client,
        )
        return await admin.revalidate(kind, slug=slug, category=category)


@app.callback(invoke_without_command=True)
def revalidate(
    kind: InvalidationType = typer.Argument(..., help="What changed"),
    slug: str | None = typer.Option(None, "--slug", "-s", help="Article slug"),
    category: str | None = typer.Option(None, "--category", "-c", help="Article category"),
    url: str = typer.Option(
        f"http://localhost:{settings.port}/cache/revalidate",
        "--url",
        "-u",
        help="Revalidation endpoint of the running service",
    ),
    secret: str = typer.Option(
        settings.revalidate_secret,
        "--secret",
        envvar="REVALIDATE_SECRET",
        help="Shared revalidation secret",
        show_default=False,
    ),
) -> None:
    """Invalidate cached responses and mark rendered pages stale."""
    if kind == InvalidationType.ARTICLE and not slug:
        typer.echo("--slug is required for article revalidation", err=True)
        raise typer.Exit(code=2)

    with LogContext(request_id=f"cli-{uuid.uuid4().hex[:8]}"):
        ok = asyncio.run(_revalidate(url, secret, kind, slug, category))

    if not ok:
        typer.echo(f"Revalidation of '{kind.value}' failed", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Revalidated '{kind.value}'")
