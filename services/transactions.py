"""Transaction store backed by SQLite."""

import sqlite3
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from models.category import Category
from models.transaction import Source, Transaction

_TRANSACTION_FIELDS = """id, user_id, description, amount, requested_amount,
    category, occurred_at, is_impulse, source"""

# Automatically generate placeholders from field count
_TRANSACTION_PLACEHOLDERS = f"({', '.join(['?'] * len(_TRANSACTION_FIELDS.split(',')))})"


class AuthorizationError(PermissionError):
    """The caller is not allowed to touch these records."""


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise AuthorizationError("User not authenticated")
    return user_id


class TransactionService:
    """Service for storing a user's transactions."""

    def __init__(self, db_manager):
        """Initialize the transaction service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def _to_row(self, transaction: Transaction, transaction_id: str) -> tuple:
        return (
            transaction_id,
            transaction.user_id,
            transaction.description,
            float(transaction.amount),
            (
                float(transaction.requested_amount)
                if transaction.requested_amount is not None
                else None
            ),
            transaction.category.value,
            transaction.occurred_at.isoformat(),
            int(transaction.is_impulse),
            transaction.source.value,
        )

    def add(self, transaction: Transaction) -> str:
        """Persist one transaction and assign its id.

        Args:
            transaction: Transaction with user_id set. Its id is ignored.

        Returns:
            The new transaction id.

        Raises:
            AuthorizationError: If the transaction has no user_id.
        """
        return self.add_batch([transaction])[0]

    def add_batch(self, transactions: List[Transaction]) -> List[str]:
        """Persist several transactions in one database transaction.

        Returns:
            New ids, in the same order as the input.

        Raises:
            AuthorizationError: If any transaction has no user_id. Nothing is written.
        """
        if not transactions:
            return []

        for t in transactions:
            _require_user(t.user_id)

        ids = [uuid.uuid4().hex for _ in transactions]
        with self.db_manager.connect() as conn:
            try:
                conn.executemany(
                    f"""
                    INSERT INTO transactions ({_TRANSACTION_FIELDS})
                    VALUES {_TRANSACTION_PLACEHOLDERS}
                    """,
                    [self._to_row(t, i) for t, i in zip(transactions, ids)],
                )
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise

        return ids

    def find_by_user(self, user_id: Optional[str]) -> List[Transaction]:
        """Get all transactions of a user.

        Returns:
            List of Transaction objects ordered by occurred_at (newest first).

        Raises:
            AuthorizationError: If user_id is empty.
        """
        user_id = _require_user(user_id)
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_TRANSACTION_FIELDS}
                FROM transactions
                WHERE user_id = ?
                ORDER BY occurred_at DESC, id
                """,
                (user_id,),
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def find(self, transaction_id: str) -> Optional[Transaction]:
        """Get a single transaction by id, or None."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_TRANSACTION_FIELDS} FROM transactions WHERE id = ?",
                (transaction_id,),
            )
            row = cursor.fetchone()
            return self._row_to_transaction(row) if row else None

    def delete(self, user_id: Optional[str], transaction_id: str) -> bool:
        """Delete a transaction owned by user_id.

        Provenance is not checked here; callers decide which records may go.

        Returns:
            True if a row was deleted, False if the id does not exist.

        Raises:
            AuthorizationError: If user_id is empty or owns a different record.
        """
        user_id = _require_user(user_id)
        existing = self.find(transaction_id)
        if existing is None:
            return False
        if existing.user_id != user_id:
            raise AuthorizationError(
                f"Transaction {transaction_id} does not belong to this user"
            )

        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ? AND user_id = ?",
                (transaction_id, user_id),
            )
            conn.commit()
            return cursor.rowcount > 0

    def _row_to_transaction(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            user_id=row["user_id"],
            description=row["description"],
            amount=Decimal(str(row["amount"])),
            requested_amount=(
                Decimal(str(row["requested_amount"]))
                if row["requested_amount"] is not None
                else None
            ),
            category=Category(row["category"]),
            occurred_at=datetime.fromisoformat(row["occurred_at"]),
            is_impulse=bool(row["is_impulse"]),
            source=Source(row["source"]),
        )
