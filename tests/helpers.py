"""Helper utilities for tests."""

from pathlib import Path
import sqlite3

from db.manager import apply_pending_migrations


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Bring a fresh test database up to the current schema."""
    apply_pending_migrations(conn, migrations_dir)
