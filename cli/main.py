"""docbot CLI — entry-point for crawl and snapshot operations.

Usage:
    python cli/main.py --help

Command groups:
    db         → database initialisation
    crawl      → one-off staged crawl of a single source
    refresh    → full staged refresh of every source (blocking)
    snapshots  → inspect production snapshots
    serve      → run the HTTP API
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from docbot.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import typer
import uvicorn

from docbot.config import Source, configure_logging, settings
from docbot.db import get_connection, init_db
from docbot.errors import DocbotError
from docbot.refresh import RefreshOrchestrator, SwapCoordinator, build_refresh

from cli.commands.snapshots import snapshots_app

app = typer.Typer(
    name="docbot",
    help="docbot crawl & snapshot CLI.",
    no_args_is_help=True,
)
app.add_typer(snapshots_app, name="snapshots")


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level."),
) -> None:
    configure_logging(log_level)


def _find_source(source_id: str) -> Source:
    sources = {s.id: s for s in settings.sources()}
    if source_id not in sources:
        typer.echo(f"Unknown source {source_id!r}. Known: {', '.join(sources)}")
        raise typer.Exit(code=1)
    return sources[source_id]


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Crawl / refresh
# ---------------------------------------------------------------------------
@app.command("crawl")
def crawl(
    source_id: str = typer.Option(..., "--source", help="Source id to crawl."),
) -> None:
    """Crawl one source into staging and promote it to production."""
    source = _find_source(source_id)
    conn = get_connection()
    init_db(conn)
    typer.echo(f"[crawl] Crawling {source.id!r} from {source.root_url} …")
    try:
        counts = SwapCoordinator(conn).commit([source])
    except DocbotError as exc:
        typer.echo(f"[crawl] Failed: {exc}")
        raise typer.Exit(code=1)
    finally:
        conn.close()
    typer.echo(f"[crawl] Promoted {counts[source.id]} page(s) for {source.id!r}.")


@app.command("refresh")
def refresh() -> None:
    """Refresh every configured source and swap them in together."""
    sources = settings.sources()
    orchestrator = RefreshOrchestrator(build_refresh(sources))
    typer.echo(f"[refresh] Refreshing {', '.join(s.id for s in sources)} …")
    try:
        orchestrator.trigger(background=False)
    finally:
        orchestrator.shutdown()

    status = orchestrator.status()
    if status.last_error:
        typer.echo(f"[refresh] Failed: {status.last_error}")
        raise typer.Exit(code=1)
    typer.echo(f"[refresh] Done in {status.last_duration or 0:.1f}s.")


# ---------------------------------------------------------------------------
# API server
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to listen on."),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes."),
) -> None:
    """Run the snapshot API (startup refresh and scheduler included)."""
    typer.echo(f"[serve] Listening on http://{host}:{port}")
    uvicorn.run("docbot.api.app:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
