import sqlite3
from datetime import datetime
from decimal import Decimal

import pytest

from models.category import Category
from models.transaction import Source
from services.transactions import AuthorizationError


class TestTransactionService:
    """Tests for TransactionService."""

    def test_add_assigns_id(self, services, make_transaction):
        """Test adding a transaction returns a fresh id and persists every field."""
        t = make_transaction(
            amount="42.50",
            category=Category.GROCERIES,
            description="BigBasket",
            user_id="alice",
            is_impulse=True,
            requested_amount=Decimal("60"),
        )

        transaction_id = services.transactions.add(t)
        found = services.transactions.find(transaction_id)

        assert found.id == transaction_id
        assert found.user_id == "alice"
        assert found.description == "BigBasket"
        assert found.amount == Decimal("42.5")
        assert found.requested_amount == Decimal("60")
        assert found.category == Category.GROCERIES
        assert found.occurred_at == datetime(2025, 3, 10, 12, 0)
        assert found.is_impulse is True
        assert found.source == Source.MANUAL

    def test_add_requires_user(self, services, make_transaction):
        """Test a transaction without an owner is rejected."""
        with pytest.raises(AuthorizationError, match="not authenticated"):
            services.transactions.add(make_transaction())

    def test_add_batch_preserves_order(self, services, make_transaction):
        """Test batch ids line up with the input."""
        batch = [
            make_transaction(description=f"Row {i}", user_id="alice", source=Source.AUTO)
            for i in range(3)
        ]

        ids = services.transactions.add_batch(batch)

        assert len(set(ids)) == 3
        for i, transaction_id in enumerate(ids):
            assert services.transactions.find(transaction_id).description == f"Row {i}"

    def test_add_batch_empty(self, services):
        """Test an empty batch is a no-op."""
        assert services.transactions.add_batch([]) == []

    def test_add_batch_all_or_nothing(self, services, make_transaction):
        """Test one ownerless transaction stops the whole batch."""
        batch = [make_transaction(user_id="alice"), make_transaction()]

        with pytest.raises(AuthorizationError):
            services.transactions.add_batch(batch)

        assert services.transactions.find_by_user("alice") == []

    def test_find_by_user_newest_first(self, services, make_transaction):
        """Test listing is ordered by occurred_at, newest first."""
        for day in (3, 15, 8):
            services.transactions.add(
                make_transaction(occurred_at=datetime(2025, 3, day), user_id="alice")
            )

        found = services.transactions.find_by_user("alice")

        assert [t.occurred_at.day for t in found] == [15, 8, 3]

    def test_find_by_user_isolation(self, services, make_transaction):
        """Test users only see their own transactions."""
        services.transactions.add(make_transaction(user_id="alice"))
        services.transactions.add(make_transaction(user_id="bob"))

        assert len(services.transactions.find_by_user("alice")) == 1
        assert services.transactions.find_by_user("carol") == []

    def test_find_by_user_requires_user(self, services):
        """Test listing without a user is rejected."""
        with pytest.raises(AuthorizationError):
            services.transactions.find_by_user("")

    def test_find_missing(self, services):
        """Test finding an unknown id returns None."""
        assert services.transactions.find("nope") is None

    def test_delete(self, services, make_transaction):
        """Test deleting an owned transaction."""
        transaction_id = services.transactions.add(make_transaction(user_id="alice"))

        assert services.transactions.delete("alice", transaction_id) is True
        assert services.transactions.find(transaction_id) is None

    def test_delete_missing(self, services):
        """Test deleting an unknown id returns False."""
        assert services.transactions.delete("alice", "nope") is False

    def test_delete_other_users_transaction(self, services, make_transaction):
        """Test a user cannot delete someone else's transaction."""
        transaction_id = services.transactions.add(make_transaction(user_id="bob"))

        with pytest.raises(AuthorizationError, match="does not belong"):
            services.transactions.delete("alice", transaction_id)

        assert services.transactions.find(transaction_id) is not None

    def test_amount_must_be_non_negative(self, services, make_transaction):
        """Test the schema refuses negative amounts."""
        with pytest.raises(sqlite3.IntegrityError):
            services.transactions.add(make_transaction(amount="-1", user_id="alice"))
