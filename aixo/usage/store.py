"""SQLite-backed `token_usage` store.

Persistence boundary:
    The store only appends rows and runs read-only reporting queries. Rows are
    never updated or deleted here.

Schema:
    `token_usage(id, provider, model, tokens, timestamp, metadata)` with
    non-unique indexes on `provider`, `model`, and `timestamp`. Timestamps are
    ISO-8601 text; non-string metadata is stored as JSON text.

Concurrency:
    Every operation opens and closes its own connection, so one store instance
    can be shared across threads. The schema is created lazily on first use.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import closing, contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Protocol

from .records import UsageRecord, UsageTotal


class UsageStore(Protocol):
    def append(self, record: UsageRecord) -> None:
        """Persist one usage record."""
        ...

    def latest(self) -> UsageRecord | None:
        """Return the most recent record, if any."""
        ...

    def totals(self) -> list[UsageTotal]:
        """Return summed tokens grouped by provider and model."""
        ...


def _to_metadata_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, default=str)


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


class SqliteUsageStore:
    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        self._ensure_schema()
        with closing(sqlite3.connect(str(self.db_path))) as conn:
            conn.row_factory = sqlite3.Row
            with conn:
                yield conn

    def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        with self._schema_lock:
            if self._schema_ready:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with closing(sqlite3.connect(str(self.db_path))) as conn, conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS token_usage (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        provider TEXT NOT NULL,
                        model TEXT NOT NULL,
                        tokens INTEGER NOT NULL DEFAULT 0 CHECK (tokens >= 0),
                        timestamp TEXT NOT NULL,
                        metadata TEXT
                    )
                    """
                )
                conn.execute("CREATE INDEX IF NOT EXISTS idx_token_usage_provider ON token_usage(provider)")
                conn.execute("CREATE INDEX IF NOT EXISTS idx_token_usage_model ON token_usage(model)")
                conn.execute("CREATE INDEX IF NOT EXISTS idx_token_usage_timestamp ON token_usage(timestamp)")
            self._schema_ready = True

    def append(self, record: UsageRecord) -> int:
        with self._connect() as conn:
            cur = conn.execute(
                "INSERT INTO token_usage (provider, model, tokens, timestamp, metadata) VALUES (?, ?, ?, ?, ?)",
                (
                    record.provider,
                    record.model,
                    int(record.tokens),
                    record.timestamp.isoformat(),
                    _to_metadata_text(record.metadata),
                ),
            )
            return int(cur.lastrowid)

    def latest(self) -> UsageRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM token_usage ORDER BY timestamp DESC, id DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        return UsageRecord(
            provider=row["provider"],
            model=row["model"],
            tokens=int(row["tokens"]),
            timestamp=_parse_timestamp(row["timestamp"]),
            metadata=row["metadata"],
        )

    def totals(self) -> list[UsageTotal]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT provider, model, SUM(tokens) AS total_tokens
                FROM token_usage
                GROUP BY provider, model
                ORDER BY provider ASC, model ASC
                """
            ).fetchall()
        return [
            UsageTotal(provider=row["provider"], model=row["model"], tokens=int(row["total_tokens"] or 0))
            for row in rows
        ]

    def count(self) -> int:
        with self._connect() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM token_usage").fetchone()[0])
