"""CLI command for running the API server.

Usage:
    mindsnack serve
    mindsnack serve --port 8080 --host 0.0.0.0
"""

from __future__ import annotations

import typer

from mindsnack.config import settings

app = typer.Typer(help="Run the Mindsnack API server")


@app.callback(invoke_without_command=True)
def serve(
    host: str = typer.Option(settings.host, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(
        False, "--reload", "-r", help="Enable auto-reload for development"
    ),
    log_level: str = typer.Option(
        "info", "--log-level", "-l", help="Log level: debug, info, warning, error"
    ),
) -> None:
    """Run the API server.

    Runs a single worker: the response cache lives in process memory and
    revalidation only reaches the process that receives it.
    """
    import uvicorn

    typer.echo("Starting Mindsnack cache service...")
    typer.echo(f"  Host: {host}")
    typer.echo(f"  Port: {port}")
    typer.echo(f"  Upstream: {settings.articles_api_url}")
    typer.echo(f"  Log level: {log_level}")
    if reload:
        typer.echo("  Reload: enabled")
    typer.echo()

    uvicorn.run(
        app="mindsnack.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=1,
        log_level=log_level.lower(),
    )
