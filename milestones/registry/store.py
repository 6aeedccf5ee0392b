"""Keyed record store for the milestone registry.

The registry keeps three independent tables keyed by owner principal:

    records     owner -> MilestoneRecord
    priorities  owner -> PriorityAnnotation
    deadlines   owner -> TemporalBound

The tables share a key but no transaction: each registry operation touches
exactly one of them, and deleting a record leaves the other two alone.

The store is injected into the registry rather than held globally, so the
registry can be tested against InMemoryTable and deployed against SqliteTable
without changes.

Usage:
    store = MilestoneStore.in_memory()
    store.records.put("alice", {"description": "ship v1", "completed": False})
    store.records.get("alice")

    # Or from config
    store = create_store(get_validated_config().store)
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol

from ..config_schema import StoreConfig

logger = logging.getLogger(__name__)

TABLE_NAMES: tuple[str, ...] = ("records", "priorities", "deadlines")


class KeyValueTable(Protocol):
    """Minimal table interface the registry depends on."""

    def get(self, key: str) -> dict[str, Any] | None: ...

    def put(self, key: str, value: dict[str, Any]) -> None: ...

    def delete(self, key: str) -> bool: ...

    def contains(self, key: str) -> bool: ...


class InMemoryTable:
    """Dict-backed table. State lives for the life of the process."""

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, Any]] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        row = self._rows.get(key)
        # Copies keep callers from mutating stored rows in place
        return dict(row) if row is not None else None

    def put(self, key: str, value: dict[str, Any]) -> None:
        self._rows[key] = dict(value)

    def delete(self, key: str) -> bool:
        return self._rows.pop(key, None) is not None

    def contains(self, key: str) -> bool:
        return key in self._rows


class SqliteTable:
    """SQLite-backed table with JSON-encoded rows.

    Uses WAL mode so readers in other processes are not blocked by the
    single writer. Each call opens its own connection; instances are cheap
    and may be shared by the three tables of one database file.
    """

    def __init__(self, db_path: Path | str, table: str) -> None:
        """Initialize the table, creating it if needed.

        Args:
            db_path: Path to SQLite database file
            table: One of TABLE_NAMES
        """
        if table not in TABLE_NAMES:
            raise ValueError(f"Unknown table '{table}', expected one of {TABLE_NAMES}")
        self.db_path = Path(db_path)
        self.table = table
        self._ensure_table()

    def _ensure_table(self) -> None:
        with self._connect() as conn:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    owner TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        try:
            yield conn
        finally:
            conn.close()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT value_json FROM {self.table} WHERE owner = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        value: dict[str, Any] = json.loads(row[0])
        return value

    def put(self, key: str, value: dict[str, Any]) -> None:
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT OR REPLACE INTO {self.table} (owner, value_json, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (key, json.dumps(value)),
            )
            conn.commit()

    def delete(self, key: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(f"DELETE FROM {self.table} WHERE owner = ?", (key,))
            conn.commit()
            return cursor.rowcount > 0

    def contains(self, key: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT 1 FROM {self.table} WHERE owner = ?", (key,)
            ).fetchone()
        return row is not None


@dataclass
class MilestoneStore:
    """The three per-owner tables behind the registry."""

    records: KeyValueTable
    priorities: KeyValueTable
    deadlines: KeyValueTable

    @classmethod
    def in_memory(cls) -> MilestoneStore:
        """Fresh, empty in-memory store."""
        return cls(
            records=InMemoryTable(),
            priorities=InMemoryTable(),
            deadlines=InMemoryTable(),
        )

    @classmethod
    def sqlite(cls, db_path: Path | str) -> MilestoneStore:
        """Store backed by one SQLite file with a table per sub-table."""
        return cls(
            records=SqliteTable(db_path, "records"),
            priorities=SqliteTable(db_path, "priorities"),
            deadlines=SqliteTable(db_path, "deadlines"),
        )


def create_store(config: StoreConfig) -> MilestoneStore:
    """Build the store selected by config.

    Args:
        config: Validated store config

    Returns:
        A MilestoneStore for the configured backend
    """
    if config.backend == "sqlite":
        if not config.path:
            raise ValueError("store.path is required when store.backend is 'sqlite'")
        logger.info("Using SQLite milestone store at %s", config.path)
        return MilestoneStore.sqlite(config.path)
    logger.info("Using in-memory milestone store")
    return MilestoneStore.in_memory()
