"""Chain snapshot persistence backed by SQLite.

The chain engine knows nothing about storage. The hosting service saves a
snapshot after each append and hands the loaded snapshot back to
``ReportChain.load_and_validate()`` at startup.

Layout: a single row (id = 1) holding the whole chain as JSON, replaced
on every save.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from civicledger.models.block import Block

_BLOCKS = TypeAdapter(list[Block])


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_SNAPSHOT = """
CREATE TABLE IF NOT EXISTS chain_snapshot (
    id          INTEGER PRIMARY KEY CHECK (id = 1),
    chain_json  TEXT NOT NULL,
    last_hash   TEXT NOT NULL,
    block_count INTEGER NOT NULL,
    updated_at  TEXT NOT NULL
);
"""


class SnapshotCorruptError(RuntimeError):
    """Raised when a stored snapshot cannot be decoded into blocks."""


class SnapshotSaveError(RuntimeError):
    """Raised when an appended block could not be made durable."""


@runtime_checkable
class SnapshotStore(Protocol):
    """Protocol for chain snapshot persistence."""

    def save(self, blocks: Sequence[Block]) -> None:
        """Durably replace the stored snapshot with ``blocks``."""
        ...

    def load(self) -> list[Block] | None:
        """Return the stored blocks, or None if nothing was ever saved."""
        ...

    def block_count(self) -> int:
        """Number of blocks in the stored snapshot, 0 if none."""
        ...


class SqliteSnapshotStore:
    """Stores the serialized chain in a single SQLite row.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_SNAPSHOT)
            conn.commit()

    def save(self, blocks: Sequence[Block]) -> None:
        """Replace the stored snapshot with ``blocks``."""
        if not blocks:
            raise ValueError("refusing to save an empty chain")
        chain_json = _BLOCKS.dump_json(list(blocks)).decode("utf-8")
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO chain_snapshot
                    (id, chain_json, last_hash, block_count, updated_at)
                VALUES (1, ?, ?, ?, ?)
                """,
                (
                    chain_json,
                    blocks[-1].hash,
                    len(blocks),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.commit()

    def load(self) -> list[Block] | None:
        """Return the stored blocks, or None if no snapshot exists.

        Raises SnapshotCorruptError if the stored JSON does not decode.
        Decoding checks shape only; integrity is the chain's job.
        """
        with self._connect() as conn:
            row = conn.execute(
                "SELECT chain_json FROM chain_snapshot WHERE id = 1"
            ).fetchone()
        if row is None:
            return None
        try:
            return _BLOCKS.validate_json(row[0])
        except ValidationError as exc:
            raise SnapshotCorruptError(
                f"Snapshot in {self._db_path} does not decode into blocks: "
                f"{exc.error_count()} error(s)"
            ) from exc

    def block_count(self) -> int:
        """Number of blocks in the stored snapshot, 0 if none."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT block_count FROM chain_snapshot WHERE id = 1"
            ).fetchone()
        return row[0] if row else 0
