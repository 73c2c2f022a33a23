"""Monthly spending caps derived from bad habit alerts."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from engine.periods import category_spend, period_key, previous_period
from models.alert import HabitAlert, Severity
from models.category import Category
from models.savings import SavingType
from models.transaction import Transaction

ZERO = Decimal("0")


@dataclass(frozen=True)
class CapDecision:
    """Outcome of checking a new amount against a category cap.

    Attributes:
        requested: Amount the user asked to spend.
        committed: Amount that may be recorded (0 when blocked).
        blocked: requested - committed.
        saving_type: PREVENTED, REDUCED, or None when nothing was blocked.
        cap: The cap that applied, or None when the category had no cap.
    """

    requested: Decimal
    committed: Decimal
    blocked: Decimal
    saving_type: Optional[SavingType]
    cap: Optional[Decimal] = None

    @property
    def is_blocked(self) -> bool:
        return self.saving_type == SavingType.PREVENTED

    @property
    def is_reduced(self) -> bool:
        return self.saving_type == SavingType.REDUCED


def compute_category_cap(
    transactions: Iterable[Transaction],
    bad_alerts: Iterable[HabitAlert],
    category: Category,
    as_of: Optional[datetime] = None,
) -> Optional[Decimal]:
    """Monthly ceiling for a category, or None when no bad alert covers it.

    cap = baseline - the alert's saving potential, floored at zero. The
    baseline is the larger of this month's and last month's category spend.
    """
    as_of = as_of or datetime.now()
    transactions = list(transactions)
    alert = next(
        (
            a
            for a in bad_alerts
            if a.severity == Severity.BAD and a.category == category
        ),
        None,
    )
    if alert is None:
        return None

    baseline = max(
        category_spend(transactions, category, period_key(as_of)),
        category_spend(transactions, category, previous_period(as_of)),
    )
    return max(ZERO, baseline - alert.saving_potential)


def apply_cap(
    amount: Decimal, cap: Optional[Decimal], month_to_date: Decimal
) -> CapDecision:
    """Decide how much of a new amount fits under a cap.

    Args:
        amount: Requested amount (positive).
        cap: Category cap from compute_category_cap(), or None.
        month_to_date: Category spend already recorded this month.

    Returns:
        CapDecision. Fully blocked amounts are PREVENTED savings, partially
        blocked ones REDUCED.
    """
    if cap is None:
        return CapDecision(amount, amount, ZERO, None)

    remaining = max(ZERO, cap - month_to_date)
    if remaining <= 0:
        return CapDecision(amount, ZERO, amount, SavingType.PREVENTED, cap)
    if amount > remaining:
        return CapDecision(
            amount, remaining, amount - remaining, SavingType.REDUCED, cap
        )
    return CapDecision(amount, amount, ZERO, None, cap)
