"""Snapshot inspection commands."""

from datetime import datetime

import typer

from docbot.config import settings
from docbot.db import get_connection, init_db
from docbot.db.snapshots import get_snapshot

snapshots_app = typer.Typer(help="Inspect production snapshots.", no_args_is_help=True)


def _when(ts: int) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


@snapshots_app.command("status")
def snapshots_status() -> None:
    """Show page count and capture time for every configured source."""
    conn = get_connection()
    init_db(conn)
    try:
        for source in settings.sources():
            snapshot = get_snapshot(conn, source.id)
            if snapshot is None:
                typer.echo(f" - {source.id}: no snapshot yet ({source.root_url})")
            else:
                typer.echo(
                    f" - {source.id}: {len(snapshot.pages)} page(s), "
                    f"captured {_when(snapshot.captured_at)}"
                )
    finally:
        conn.close()


@snapshots_app.command("show")
def snapshots_show(
    source_id: str = typer.Argument(..., help="Source id."),
    limit: int = typer.Option(20, help="Maximum number of pages to list."),
) -> None:
    """List the pages stored in a source's production snapshot."""
    conn = get_connection()
    init_db(conn)
    try:
        snapshot = get_snapshot(conn, source_id)
    finally:
        conn.close()

    if snapshot is None:
        typer.echo(f"No snapshot for {source_id!r}.")
        raise typer.Exit(code=1)

    typer.echo(f"{source_id}: {len(snapshot.pages)} page(s) from {snapshot.root_url}")
    for page in snapshot.pages[:limit]:
        typer.echo(f" - {page.title} <{page.url}>")
