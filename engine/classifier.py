"""Impulse and habit classification for a single transaction."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from engine.periods import period_key
from engine.rules import HABIT_THRESHOLD, IMPULSE_THRESHOLD
from models.category import is_essential
from models.transaction import Transaction


@dataclass(frozen=True)
class ClassificationFlags:
    impulse: bool
    habit: bool


def is_impulse(
    transaction: Transaction, impulse_threshold: Decimal = IMPULSE_THRESHOLD
) -> bool:
    """A non-essential purchase strictly above the threshold."""
    return (
        not is_essential(transaction.category)
        and transaction.amount > impulse_threshold
    )


def count_same_category_in_month(
    transaction: Transaction, history: Iterable[Transaction]
) -> int:
    """Occurrences of the transaction's category in its calendar month, itself included."""
    period = period_key(transaction.occurred_at)
    count = 1
    for other in history:
        if transaction.id is not None and other.id == transaction.id:
            # Already counted as the candidate
            continue
        if other.category == transaction.category and period_key(other.occurred_at) == period:
            count += 1
    return count


def classify(
    transaction: Transaction,
    history: Iterable[Transaction],
    impulse_threshold: Decimal = IMPULSE_THRESHOLD,
    habit_threshold: int = HABIT_THRESHOLD,
) -> ClassificationFlags:
    """Classify a candidate transaction against the user's history.

    The candidate does not need an id. If it has one and also appears in
    history it is counted once.

    Args:
        transaction: Transaction being created.
        history: Previously recorded transactions of the same user.
        impulse_threshold: Amount a non-essential purchase must exceed.
        habit_threshold: Same-category count in the month that makes a habit.

    Returns:
        ClassificationFlags with impulse and habit set.
    """
    return ClassificationFlags(
        impulse=is_impulse(transaction, impulse_threshold),
        habit=count_same_category_in_month(transaction, history) >= habit_threshold,
    )
