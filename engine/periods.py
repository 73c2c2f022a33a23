"""Calendar month helpers shared by the rule engine."""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, List

from dateutil.relativedelta import relativedelta

from models.category import Category
from models.transaction import Transaction


def period_key(moment: datetime) -> str:
    """Calendar month of a timestamp as "YYYY-MM"."""
    return f"{moment.year:04d}-{moment.month:02d}"


def previous_period(moment: datetime) -> str:
    return period_key(moment - relativedelta(months=1))


def in_period(transactions: Iterable[Transaction], period: str) -> List[Transaction]:
    return [t for t in transactions if period_key(t.occurred_at) == period]


def category_spend(
    transactions: Iterable[Transaction], category: Category, period: str
) -> Decimal:
    """Total committed amount for one category in one calendar month."""
    return sum(
        (t.amount for t in in_period(transactions, period) if t.category == category),
        Decimal("0"),
    )
