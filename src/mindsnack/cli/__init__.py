"""CLI commands for the Mindsnack cache service.

Provides command-line interface using Typer:
- mindsnack serve: Run the API server
- mindsnack revalidate: Invalidate cached responses after a manual upstream edit

Usage:
    mindsnack --help
    mindsnack serve --port 8080
    mindsnack revalidate article --slug on-reading --category essays
"""

import typer

from mindsnack.cli.revalidate_cmd import app as revalidate_app
from mindsnack.cli.serve import app as serve_app

app = typer.Typer(
    name="mindsnack",
    help="Mindsnack Books: read-through cache and revalidation service",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(revalidate_app, name="revalidate")


@app.callback()
def callback() -> None:
    """Mindsnack Books: read-through cache and revalidation service."""


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
