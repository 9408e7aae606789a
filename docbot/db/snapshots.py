"""Read/write helpers for the ``snapshots`` table.

Each source owns at most two rows: ``staging`` (being built by a crawl) and
``production`` (last completed crawl, the only stage readers see).  All writes
are upserts keyed by ``(source_id, stage)``.

Every :class:`sqlite3.Error` raised while writing is re-raised as
:class:`~docbot.errors.PersistenceError`.
"""

from __future__ import annotations

import sqlite3
from time import time
from typing import Iterable, Optional

from docbot.db.models import PRODUCTION, STAGING, Snapshot
from docbot.errors import PersistenceError


def _placeholders(values: list[str]) -> str:
    return ", ".join("?" for _ in values)


# ---------------------------------------------------------------------------
# Single-row operations
# ---------------------------------------------------------------------------

def upsert_snapshot(
    conn: sqlite3.Connection,
    snapshot: Snapshot,
    stage: str = STAGING,
) -> Snapshot:
    """Insert or replace the *stage* row for ``snapshot.source_id``.

    ``captured_at`` is set to now when the snapshot has none.
    """
    if not snapshot.captured_at:
        snapshot.captured_at = int(time())
    try:
        with conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO snapshots (source_id, stage, root_url, content, captured_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    snapshot.source_id,
                    stage,
                    snapshot.root_url,
                    snapshot.content_json(),
                    snapshot.captured_at,
                ),
            )
    except sqlite3.Error as exc:
        raise PersistenceError(
            f"Could not write {stage} snapshot for {snapshot.source_id!r}: {exc}"
        ) from exc
    return snapshot


def get_snapshot(
    conn: sqlite3.Connection,
    source_id: str,
    stage: str = PRODUCTION,
) -> Optional[Snapshot]:
    """Fetch one snapshot.  Returns ``None`` if the row does not exist."""
    row = conn.execute(
        "SELECT * FROM snapshots WHERE source_id = ? AND stage = ?",
        (source_id, stage),
    ).fetchone()
    return Snapshot.from_row(row) if row else None


def list_snapshots(conn: sqlite3.Connection, stage: str = PRODUCTION) -> list[Snapshot]:
    """Return every snapshot in *stage*, ordered by source id."""
    rows = conn.execute(
        "SELECT * FROM snapshots WHERE stage = ? ORDER BY source_id",
        (stage,),
    ).fetchall()
    return [Snapshot.from_row(r) for r in rows]


def delete_snapshot(conn: sqlite3.Connection, source_id: str, stage: str = STAGING) -> None:
    """Delete one snapshot row.  No-op if it does not exist."""
    try:
        with conn:
            conn.execute(
                "DELETE FROM snapshots WHERE source_id = ? AND stage = ?",
                (source_id, stage),
            )
    except sqlite3.Error as exc:
        raise PersistenceError(
            f"Could not delete {stage} snapshot for {source_id!r}: {exc}"
        ) from exc


# ---------------------------------------------------------------------------
# Multi-row operations
# ---------------------------------------------------------------------------

def discard_staging(conn: sqlite3.Connection, source_ids: Iterable[str]) -> None:
    """Delete the staging rows of *source_ids*; production rows are untouched."""
    ids = list(source_ids)
    if not ids:
        return
    try:
        with conn:
            conn.execute(
                f"DELETE FROM snapshots WHERE stage = ? AND source_id IN ({_placeholders(ids)})",  # noqa: S608
                [STAGING, *ids],
            )
    except sqlite3.Error as exc:
        raise PersistenceError(f"Could not discard staging snapshots: {exc}") from exc


def promote_staging(conn: sqlite3.Connection, source_ids: Iterable[str]) -> None:
    """Copy staging rows over production and delete them, in one transaction.

    Either every source in *source_ids* is promoted or none is: a missing
    staging row or any store error rolls the whole transaction back.

    Raises:
        PersistenceError: If the promotion could not be completed.
    """
    ids = list(source_ids)
    if not ids:
        return

    try:
        with conn:
            present = {
                row["source_id"]
                for row in conn.execute(
                    f"SELECT source_id FROM snapshots WHERE stage = ? AND source_id IN ({_placeholders(ids)})",  # noqa: S608
                    [STAGING, *ids],
                ).fetchall()
            }
            missing = [sid for sid in ids if sid not in present]
            if missing:
                raise PersistenceError(f"No staging snapshot for: {', '.join(missing)}")

            for source_id in ids:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO snapshots (source_id, stage, root_url, content, captured_at)
                    SELECT source_id, ?, root_url, content, captured_at
                    FROM   snapshots
                    WHERE  source_id = ? AND stage = ?
                    """,
                    (PRODUCTION, source_id, STAGING),
                )
            conn.execute(
                f"DELETE FROM snapshots WHERE stage = ? AND source_id IN ({_placeholders(ids)})",  # noqa: S608
                [STAGING, *ids],
            )
    except sqlite3.Error as exc:
        raise PersistenceError(f"Could not promote staging snapshots: {exc}") from exc
