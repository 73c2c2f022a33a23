"""Habit alert engine.

recompute_alerts() rebuilds the full alert list from a transaction set. It
never patches a previous result: alerts are collected in a dict keyed by
derive_alert_key(), so one (category, template, month) yields one alert no
matter how often the rebuild runs.

Dismissal is not part of the rebuild. A dismissed alert whose pattern still
holds comes back on the next recompute unless the caller filters it with
apply_dismissals().
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from engine.periods import in_period, period_key, previous_period
from engine.rules import BAD_ALERT_THRESHOLD, GOOD_DROP_RATIO, HABIT_THRESHOLD
from logger import get_logger
from models.alert import HabitAlert, Severity
from models.category import Category
from models.transaction import Transaction

logger = get_logger("alerts")

HABIT_TEMPLATE = "habit"
IMPROVING_TEMPLATE = "improving"

_TITLES = {
    HABIT_TEMPLATE: "Frequent {label} spending",
    IMPROVING_TEMPLATE: "{label} spending is down",
}

_SEVERITY_ORDER = {Severity.BAD: 0, Severity.WARNING: 1, Severity.GOOD: 2}
_CATEGORY_ORDER = {category: index for index, category in enumerate(Category)}


def derive_alert_key(category: Category, template: str, period: str) -> str:
    """Deterministic alert identity used for deduplication."""
    return f"{category.value}:{template}:{period}"


def _chronological(transactions: Iterable[Transaction]) -> List[Transaction]:
    return sorted(transactions, key=lambda t: (t.occurred_at, t.id or ""))


def _habit_alert(
    category: Category,
    period: str,
    transactions: List[Transaction],
    habit_threshold: int,
    bad_alert_threshold: Decimal,
) -> HabitAlert:
    ordered = _chronological(transactions)
    baseline = habit_threshold - 1
    # Everything past the baseline count is what the habit costs
    excess = sum((t.amount for t in ordered[baseline:]), Decimal("0"))
    total = sum((t.amount for t in ordered), Decimal("0"))
    severity = Severity.BAD if excess > bad_alert_threshold else Severity.WARNING
    label = category.label

    return HabitAlert(
        id=derive_alert_key(category, HABIT_TEMPLATE, period),
        category=category,
        period=period,
        title=_TITLES[HABIT_TEMPLATE].format(label=label.lower()),
        description=(
            f"{len(ordered)} {label.lower()} transactions in {period} "
            f"totalling {total:.0f}."
        ),
        suggestion=(
            f"Keep {label.lower()} to {baseline} purchases a month "
            f"to save about {excess:.0f}."
        ),
        severity=severity,
        saving_potential=excess,
    )


def _improving_alert(
    category: Category, period: str, current: Decimal, previous: Decimal
) -> HabitAlert:
    drop_pct = (previous - current) / previous * 100
    label = category.label
    return HabitAlert(
        id=derive_alert_key(category, IMPROVING_TEMPLATE, period),
        category=category,
        period=period,
        title=_TITLES[IMPROVING_TEMPLATE].format(label=label),
        description=(
            f"{label} spending is {drop_pct:.0f}% lower than last month "
            f"({current:.0f} vs {previous:.0f})."
        ),
        suggestion=f"Nice work. Keep {label.lower()} spending on this track.",
        severity=Severity.GOOD,
        saving_potential=Decimal("0"),
    )


def recompute_alerts(
    transactions: Iterable[Transaction],
    as_of: Optional[datetime] = None,
    habit_threshold: int = HABIT_THRESHOLD,
    bad_alert_threshold: Decimal = BAD_ALERT_THRESHOLD,
    good_drop_ratio: Decimal = GOOD_DROP_RATIO,
) -> List[HabitAlert]:
    """Rebuild all alerts for the month containing as_of.

    Args:
        transactions: The user's full transaction set.
        as_of: Moment defining the current month. Defaults to now.
        habit_threshold: Same-category count that triggers a habit alert.
        bad_alert_threshold: Saving potential above which a habit alert is bad.
        good_drop_ratio: Month-over-month drop that earns a good alert.

    Returns:
        Alerts ordered by severity (bad, warning, good), then saving potential
        (highest first), then category.
    """
    as_of = as_of or datetime.now()
    transactions = list(transactions)
    period = period_key(as_of)
    last_period = previous_period(as_of)

    current: Dict[Category, List[Transaction]] = defaultdict(list)
    for t in in_period(transactions, period):
        current[t.category].append(t)

    previous_totals: Dict[Category, Decimal] = defaultdict(Decimal)
    for t in in_period(transactions, last_period):
        previous_totals[t.category] += t.amount

    alerts: Dict[str, HabitAlert] = {}

    for category, items in current.items():
        if len(items) >= habit_threshold:
            alert = _habit_alert(
                category, period, items, habit_threshold, bad_alert_threshold
            )
            alerts[alert.id] = alert

        previous = previous_totals.get(category, Decimal("0"))
        spent = sum((t.amount for t in items), Decimal("0"))
        if previous > 0 and spent <= previous * (1 - good_drop_ratio):
            alert = _improving_alert(category, period, spent, previous)
            alerts[alert.id] = alert

    ordered = sorted(
        alerts.values(),
        key=lambda a: (
            _SEVERITY_ORDER[a.severity],
            -a.saving_potential,
            _CATEGORY_ORDER[a.category],
            a.id,
        ),
    )
    logger.debug(f"Recomputed {len(ordered)} alert(s) for {period}")
    return ordered


def bad_alerts(alerts: Iterable[HabitAlert]) -> List[HabitAlert]:
    return [a for a in alerts if a.severity == Severity.BAD]


def potential_savings(alerts: Iterable[HabitAlert]) -> Decimal:
    """Monthly amount recoverable across bad alerts."""
    return sum((a.saving_potential for a in bad_alerts(alerts)), Decimal("0"))


def apply_dismissals(
    alerts: Iterable[HabitAlert], dismissed: Iterable[str]
) -> List[HabitAlert]:
    """Drop alerts whose key the user dismissed."""
    dismissed = set(dismissed)
    return [a for a in alerts if a.id not in dismissed]
