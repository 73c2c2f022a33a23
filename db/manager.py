"""Database manager for SQLite connections and schema migrations."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import List, Set

from config import Config, get_migrations_dir
from logger import get_logger

logger = get_logger()


class DatabaseManager:
    """Manages database connections and paths.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        self.config = config

    @contextmanager
    def connect(self):
        """Get a database connection with automatic cleanup.

        Rows come back as sqlite3.Row so services can read columns by name.

        Yields:
            sqlite3.Connection: Database connection.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def get_db_path(self) -> Path:
        return self.config.db_path

    def get_migrations_dir(self) -> Path:
        return get_migrations_dir()


def init_schema_migrations_table(conn: sqlite3.Connection) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            migration_file TEXT PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()


def get_applied_migrations(conn: sqlite3.Connection) -> Set[str]:
    cursor = conn.execute(
        "SELECT migration_file FROM schema_migrations ORDER BY migration_file"
    )
    return {row[0] for row in cursor.fetchall()}


def get_available_migrations(migrations_dir: Path) -> List[str]:
    if not migrations_dir.exists():
        return []
    return sorted(path.name for path in migrations_dir.glob("*.sql"))


def apply_pending_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> List[str]:
    """Apply every migration not yet recorded in schema_migrations.

    Args:
        conn: Open connection.
        migrations_dir: Directory of ordered .sql files.

    Returns:
        Names of the migrations applied, in order.

    Raises:
        sqlite3.Error: If a migration fails. That migration is rolled back.
    """
    init_schema_migrations_table(conn)
    applied = get_applied_migrations(conn)
    pending = [
        m for m in get_available_migrations(migrations_dir) if m not in applied
    ]

    for migration_file in pending:
        sql = (migrations_dir / migration_file).read_text()
        try:
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_migrations (migration_file) VALUES (?)",
                (migration_file,),
            )
            conn.commit()
            logger.info(f"Applied migration: {migration_file}")
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Error applying migration {migration_file}: {e}")
            raise

    return pending
