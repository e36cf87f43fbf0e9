"""SQLite storage backend for version history.

Provides persistent storage behind the same interface as the in-memory
backend. Chronological order is kept in an integer position column so that
rollback truncation is a single range delete.
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from uiforge.ir import Explanation, Plan

from ..models import Version, VersionSummary

logger = logging.getLogger(__name__)

# SQL Schema
SCHEMA_SQL = """
-- Versions table; position gives chronological order
CREATE TABLE IF NOT EXISTS versions (
    position INTEGER PRIMARY KEY,
    id TEXT NOT NULL UNIQUE,
    timestamp TEXT NOT NULL,
    user_intent TEXT NOT NULL,
    plan TEXT NOT NULL,  -- JSON
    code TEXT NOT NULL,
    explanation TEXT,  -- JSON
    is_modification INTEGER NOT NULL DEFAULT 0,
    parent_id TEXT
);

CREATE INDEX IF NOT EXISTS idx_versions_id ON versions(id);
"""


class SQLiteStorage:
    """SQLite-based storage backend.

    Args:
        db_path: Path to SQLite database file (``":memory:"`` is accepted).
    """

    def __init__(self, db_path: Path | str):
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection, creating if needed."""
        if self._conn is None:
            raise RuntimeError("Storage not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Initialize storage (create database and tables)."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()

        logger.info(f"Initialized SQLite version storage at {self.db_path}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    # =========================================================================
    # Version Operations
    # =========================================================================

    def append(self, version: Version) -> Version:
        """Append a version at the end of the history."""
        conn = self._get_conn()
        conn.execute(
            """
            INSERT INTO versions (
                id, timestamp, user_intent, plan, code,
                explanation, is_modification, parent_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                version.id,
                version.timestamp.isoformat(),
                version.user_intent,
                version.plan.to_json(),
                version.code,
                json.dumps(version.explanation.to_json_dict())
                if version.explanation
                else None,
                int(version.is_modification),
                version.parent_id,
            ),
        )
        conn.commit()
        return version

    def get(self, version_id: str) -> Version | None:
        """Get a version by ID."""
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM versions WHERE id = ?", (version_id,)
        ).fetchone()
        if row:
            return self._row_to_version(row)
        return None

    def ids(self) -> list[str]:
        """Version IDs in chronological order."""
        conn = self._get_conn()
        rows = conn.execute("SELECT id FROM versions ORDER BY position").fetchall()
        return [row["id"] for row in rows]

    def list_versions(self) -> list[Version]:
        """All versions in chronological order."""
        conn = self._get_conn()
        rows = conn.execute("SELECT * FROM versions ORDER BY position").fetchall()
        return [self._row_to_version(row) for row in rows]

    def list_summaries(self) -> list[VersionSummary]:
        """Listing metadata in chronological order; plan and code stay on disk."""
        conn = self._get_conn()
        rows = conn.execute(
            """
            SELECT id, timestamp, user_intent, is_modification
            FROM versions ORDER BY position
            """
        ).fetchall()
        return [
            VersionSummary(
                id=row["id"],
                timestamp=datetime.fromisoformat(row["timestamp"]),
                user_intent=row["user_intent"],
                is_modification=bool(row["is_modification"]),
            )
            for row in rows
        ]

    def truncate_after(self, version_id: str) -> list[str] | None:
        """Remove every version after ``version_id`` in one transaction."""
        conn = self._get_conn()
        row = conn.execute(
            "SELECT position FROM versions WHERE id = ?", (version_id,)
        ).fetchone()
        if not row:
            return None

        position = row["position"]
        try:
            removed = [
                r["id"]
                for r in conn.execute(
                    "SELECT id FROM versions WHERE position > ? ORDER BY position",
                    (position,),
                ).fetchall()
            ]
            conn.execute("DELETE FROM versions WHERE position > ?", (position,))
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        return removed

    def clear(self) -> None:
        """Remove every version."""
        conn = self._get_conn()
        conn.execute("DELETE FROM versions")
        conn.commit()

    def count(self) -> int:
        """Number of stored versions."""
        conn = self._get_conn()
        row = conn.execute("SELECT COUNT(*) AS n FROM versions").fetchone()
        return row["n"]

    # =========================================================================
    # Helpers
    # =========================================================================

    def _row_to_version(self, row: sqlite3.Row) -> Version:
        """Convert database row to Version object."""
        return Version(
            id=row["id"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
            user_intent=row["user_intent"],
            plan=Plan.model_validate_json(row["plan"]),
            code=row["code"],
            explanation=Explanation.model_validate_json(row["explanation"])
            if row["explanation"]
            else None,
            is_modification=bool(row["is_modification"]),
            parent_id=row["parent_id"],
        )
