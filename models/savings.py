"""Savings ledger models."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class SavingType(str, Enum):
    """How a saving was realized."""

    PREVENTED = "PREVENTED"  # transaction blocked entirely by a cap
    REDUCED = "REDUCED"  # transaction amount cut down by a cap
    OPTIMIZED = "OPTIMIZED"  # any other reduction path

    @property
    def bucket(self) -> str:
        return self.value.lower()


@dataclass(frozen=True)
class SavingsSummary:
    """Aggregate of a savings ledger. total is always the sum of the buckets."""

    prevented: Decimal = Decimal("0")
    reduced: Decimal = Decimal("0")
    optimized: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return self.prevented + self.reduced + self.optimized

    def to_dict(self) -> dict:
        return {
            "total": float(self.total),
            "prevented": float(self.prevented),
            "reduced": float(self.reduced),
            "optimized": float(self.optimized),
        }
