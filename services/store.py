"""Key/value store backed by SQLite, used for the savings ledger and dismissals."""

import json
from typing import Any, Optional


class KeyValueService:
    """Minimal get/set repository over the kv_store table.

    Values are stored as JSON text, so anything json.dumps accepts round-trips.
    """

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if the key is absent."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cursor.fetchone()
            return json.loads(row[0]) if row else None

    def set(self, key: str, value: Any) -> None:
        """Insert or replace the value stored under key."""
        with self.db_manager.connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, json.dumps(value, sort_keys=True)),
            )
            conn.commit()
