"""Shared pytest fixtures for all tests."""

import sqlite3
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from config import Config, get_migrations_dir
from models.category import Category
from models.transaction import Source, Transaction
from services.base import Services
from tests.helpers import run_migrations


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing.

    Yields:
        sqlite3.Connection: Connection to in-memory database.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "spendguard",
        db_data_dir=tmp_path / "spendguard" / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=tmp_path / "spendguard" / "logs",
        llm_enabled=False,
    )


@pytest.fixture
def db_manager_with_schema(test_db):
    """Create a DatabaseManager stand-in with schema already set up.

    Args:
        test_db: In-memory database connection fixture.

    Returns:
        A database manager that always hands out the in-memory connection.
    """
    run_migrations(test_db, get_migrations_dir())

    class TestDatabaseManager:
        """Test database manager that uses in-memory connection."""

        def __init__(self, conn):
            self.conn = conn

        def connect(self):
            return _TestConnectionContext(self.conn)

        def get_db_path(self):
            return Path(":memory:")

        def get_migrations_dir(self):
            return get_migrations_dir()

    class _TestConnectionContext:
        """Context manager for test database connections."""

        def __init__(self, conn):
            self.conn = conn

        def __enter__(self):
            return self.conn

        def __exit__(self, exc_type, exc_val, exc_tb):
            # Don't close the connection - let the fixture handle it
            pass

    return TestDatabaseManager(test_db)


@pytest.fixture
def services(test_config, db_manager_with_schema):
    """Create a Services container with test database and no advisor.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, db_manager=db_manager_with_schema, advisory_provider=None)


@pytest.fixture
def make_transaction():
    """Factory for Transaction objects with sensible defaults."""

    def _make(
        amount="100",
        category=Category.FOOD,
        occurred_at=datetime(2025, 3, 10, 12, 0),
        description="Test purchase",
        source=Source.MANUAL,
        **kwargs,
    ):
        return Transaction(
            description=description,
            amount=Decimal(str(amount)),
            category=category,
            occurred_at=occurred_at,
            source=source,
            **kwargs,
        )

    return _make


class InMemoryStore:
    """Dict-backed get/set store for ledger tests."""

    def __init__(self):
        self.data = {}
        self.writes = 0

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.writes += 1
        self.data[key] = value


@pytest.fixture
def memory_store():
    return InMemoryStore()
