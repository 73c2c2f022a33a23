from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from models.category import Category


class Source(str, Enum):
    """Where a transaction came from."""

    MANUAL = "MANUAL"  # typed in by the user, deletable
    AUTO = "AUTO"  # imported from a bank statement, immutable


@dataclass
class Transaction:
    description: str
    amount: Decimal  # committed amount, always positive
    category: Category
    occurred_at: datetime
    source: Source
    is_impulse: bool = False
    requested_amount: Optional[Decimal] = None  # pre-cap amount, set only when a cap cut it down
    user_id: Optional[str] = None
    id: Optional[str] = None  # assigned by the store

    @property
    def is_deletable(self) -> bool:
        return self.source == Source.MANUAL

    @property
    def reduced_by(self) -> Decimal:
        """Amount a spending cap removed from this transaction (0 if none)."""
        if self.requested_amount is None or self.requested_amount <= self.amount:
            return Decimal("0")
        return self.requested_amount - self.amount

    def with_id(self, transaction_id: str) -> "Transaction":
        return replace(self, id=transaction_id)

    def to_dict(self) -> dict:
        """Convert transaction to dictionary for display and export."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "description": self.description,
            "amount": float(self.amount),
            "requested_amount": (
                float(self.requested_amount)
                if self.requested_amount is not None
                else None
            ),
            "category": self.category.value,
            "occurred_at": self.occurred_at.isoformat(),
            "is_impulse": self.is_impulse,
            "source": self.source.value,
        }
