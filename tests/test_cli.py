"""Tests for the docbot CLI."""

from __future__ import annotations

from functools import partial

import pytest
from typer.testing import CliRunner

from docbot.config import Source
from docbot.crawler.crawler import CrawlStats
from docbot.db import get_connection, init_db
from docbot.db.models import PRODUCTION, Snapshot
from docbot.db.snapshots import get_snapshot, upsert_snapshot
from docbot.errors import PersistenceError
from docbot.refresh.swap import SwapCoordinator
from docbot.scraper.models import PageRecord

from cli.main import app
from tests.conftest import ROOT

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Point the CLI at a fresh workspace with a single source."""
    monkeypatch.setattr("docbot.config.settings.workspace_dir", tmp_path)
    monkeypatch.setattr("docbot.config.settings.source_spec", f"docs={ROOT}")
    return tmp_path


def _fake_crawl(source: Source, writer) -> CrawlStats:
    writer.append(PageRecord(url=source.root_url, title="Guide", text="Guide text"))
    return CrawlStats(source_id=source.id, saved=1)


def test_db_init(workspace):
    result = runner.invoke(app, ["db", "init"])
    assert result.exit_code == 0
    assert (workspace / "snapshots.db").exists()


def test_snapshots_status_without_data(workspace):
    result = runner.invoke(app, ["snapshots", "status"])
    assert result.exit_code == 0
    assert "docs: no snapshot yet" in result.stdout


def test_snapshots_status_and_show(workspace):
    conn = get_connection()
    init_db(conn)
    upsert_snapshot(
        conn,
        Snapshot(
            source_id="docs",
            root_url=ROOT,
            pages=[PageRecord(url=ROOT, title="Guide", text="t")],
            captured_at=1_700_000_000,
        ),
        PRODUCTION,
    )
    conn.close()

    status = runner.invoke(app, ["snapshots", "status"])
    assert status.exit_code == 0
    assert "docs: 1 page(s)" in status.stdout

    show = runner.invoke(app, ["snapshots", "show", "docs"])
    assert show.exit_code == 0
    assert f"Guide <{ROOT}>" in show.stdout


def test_snapshots_show_missing(workspace):
    result = runner.invoke(app, ["snapshots", "show", "docs"])
    assert result.exit_code == 1


def test_crawl_promotes_single_source(workspace, monkeypatch):
    monkeypatch.setattr("cli.main.SwapCoordinator", partial(SwapCoordinator, crawl=_fake_crawl))

    result = runner.invoke(app, ["crawl", "--source", "docs"])

    assert result.exit_code == 0
    assert "Promoted 1 page(s)" in result.stdout
    conn = get_connection()
    try:
        assert get_snapshot(conn, "docs").pages[0].title == "Guide"
    finally:
        conn.close()


def test_crawl_unknown_source(workspace):
    result = runner.invoke(app, ["crawl", "--source", "nope"])
    assert result.exit_code == 1
    assert "Unknown source" in result.stdout


def test_refresh_reports_failure(workspace, monkeypatch):
    def failing_refresh(sources, conn_factory=None):
        def run():
            raise PersistenceError("store unavailable")
        return run

    monkeypatch.setattr("cli.main.build_refresh", failing_refresh)

    result = runner.invoke(app, ["refresh"])

    assert result.exit_code == 1
    assert "PersistenceError: store unavailable" in result.stdout


def test_refresh_success(workspace, monkeypatch):
    monkeypatch.setattr("cli.main.build_refresh", lambda sources: (lambda: None))

    result = runner.invoke(app, ["refresh"])

    assert result.exit_code == 0
    assert "[refresh] Done" in result.stdout


def test_serve_runs_uvicorn(workspace, monkeypatch):
    calls = []
    monkeypatch.setattr("uvicorn.run", lambda target, **kwargs: calls.append((target, kwargs)))

    result = runner.invoke(app, ["serve", "--host", "0.0.0.0", "--port", "9000"])

    assert result.exit_code == 0
    assert calls == [
        ("docbot.api.app:app", {"host": "0.0.0.0", "port": 9000, "reload": False})
    ]
