"""
Slot storage backend (SQLite key-value table).

Each slot holds one whole record sequence encoded as a JSON array.
Saves always replace the entire slot; loads never fail the caller.
"""
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

TASKS_SLOT = "tasks"
CATEGORIES_SLOT = "categories"


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection in WAL mode."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


class SlotStore:
    """SQLite-backed store of named record sequences."""

    def __init__(self, db_path: str):
        """Initialize store and create the slots table if needed."""
        self.db_path = str(db_path)
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self) -> None:
        conn = _connect(self.db_path)
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS slots (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def load(self, slot: str) -> List[Dict[str, Any]]:
        """
        Read a slot as a list of records.

        Missing slot, undecodable JSON, or a value that is not a JSON
        array all yield an empty list.
        """
        try:
            text = self.raw(slot)
        except sqlite3.Error as e:
            logger.warning(f"Unable to read slot {slot!r}: {e}")
            return []

        if not text:
            return []

        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Unable to decode slot {slot!r}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Slot {slot!r} does not hold a sequence ({type(data).__name__}); ignoring")
            return []
        return data

    def save(self, slot: str, records: List[Dict[str, Any]]) -> None:
        """Replace the whole slot with the JSON-encoded records."""
        self.write_raw(slot, json.dumps(list(records), ensure_ascii=False))
        logger.debug(f"Saved slot {slot!r} ({len(records)} records)")

    def raw(self, slot: str) -> Optional[str]:
        """Stored text of a slot, or None when absent."""
        conn = _connect(self.db_path)
        try:
            row = conn.execute("SELECT value FROM slots WHERE key = ?", (slot,)).fetchone()
        finally:
            conn.close()
        return row["value"] if row else None

    def write_raw(self, slot: str, text: str) -> None:
        """Store text verbatim in a single transaction."""
        now = datetime.now(timezone.utc).isoformat()
        conn = _connect(self.db_path)
        try:
            conn.execute("""
                INSERT INTO slots (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
            """, (slot, text, now))
            conn.commit()
        finally:
            conn.close()

    def slots(self) -> List[str]:
        """Names of all stored slots."""
        conn = _connect(self.db_path)
        try:
            rows = conn.execute("SELECT key FROM slots ORDER BY key").fetchall()
        finally:
            conn.close()
        return [r["key"] for r in rows]
