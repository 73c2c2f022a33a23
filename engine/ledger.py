"""Per-user savings ledger.

The ledger lives in a key/value store under "savings:{user_key}". It holds
two kinds of evidence:

- events: savings recorded explicitly (PREVENTED when a cap blocked a
  transaction outright, OPTIMIZED for anything else), keyed by event id.
- transactions: a committed transaction whose requested_amount is above its
  amount carries a REDUCED saving.

reconcile() rebuilds every period bucket from that evidence on each call, so
running it twice over the same transactions and events gives the same
numbers. Nothing is ever added to a running total.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, Optional

from engine.periods import period_key
from logger import get_logger
from models.savings import SavingsSummary, SavingType
from models.transaction import Transaction

logger = get_logger("ledger")

GUEST_USER_KEY = "guest"

_BUCKETS = tuple(t.bucket for t in SavingType)


def normalize_user_key(user_key: Optional[str]) -> str:
    """Ledger keys are case-insensitive; blank means the anonymous guest."""
    key = (user_key or "").strip().lower()
    return key or GUEST_USER_KEY


def ledger_key(user_key: Optional[str]) -> str:
    return f"savings:{normalize_user_key(user_key)}"


@dataclass(frozen=True)
class ReconcileResult:
    summary: SavingsSummary  # all periods
    current: SavingsSummary  # period containing as_of
    state: dict  # what was persisted


def _empty_buckets() -> Dict[str, Decimal]:
    return {bucket: Decimal("0") for bucket in _BUCKETS}


def _summarize(buckets: Dict[str, Decimal]) -> SavingsSummary:
    return SavingsSummary(
        prevented=buckets["prevented"],
        reduced=buckets["reduced"],
        optimized=buckets["optimized"],
    )


class SavingsLedger:
    """Savings ledger over an injected key/value store.

    Args:
        store: Object with get(key) -> value or None, and set(key, value).
               Values are JSON-compatible dicts.
    """

    def __init__(self, store):
        self.store = store

    def _load(self, user_key: Optional[str]) -> dict:
        state = self.store.get(ledger_key(user_key))
        return state if isinstance(state, dict) else {}

    def record_saving(
        self,
        user_key: Optional[str],
        saving_type: SavingType,
        amount: Decimal,
        at: Optional[datetime] = None,
        event_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> str:
        """Record an explicit saving event.

        Recording the same event_id again replaces the earlier event. REDUCED
        savings are derived from transactions and cannot be recorded here.

        Returns:
            The event id.

        Raises:
            ValueError: If saving_type is REDUCED or amount is not positive.
        """
        if saving_type == SavingType.REDUCED:
            raise ValueError("REDUCED savings come from transactions, not events")
        if amount <= 0:
            raise ValueError(f"Saving amount must be positive, got {amount}")

        at = at or datetime.now()
        event_id = event_id or uuid.uuid4().hex
        state = self._load(user_key)
        events = dict(state.get("events", {}))
        events[event_id] = {
            "period": period_key(at),
            "type": saving_type.value,
            "amount": str(amount),
            "note": note,
        }
        state["events"] = events
        self.store.set(ledger_key(user_key), state)

        logger.info(
            f"Recorded {saving_type.value} saving of {amount} for "
            f"{normalize_user_key(user_key)} ({event_id})"
        )
        return event_id

    def reconcile(
        self,
        user_key: Optional[str],
        transactions: Iterable[Transaction],
        as_of: Optional[datetime] = None,
    ) -> ReconcileResult:
        """Rebuild the ledger from recorded events and current transactions.

        Args:
            user_key: Ledger owner; case-insensitive, None/blank means guest.
            transactions: The owner's current transaction set.
            as_of: Moment defining the current period. Defaults to now.

        Returns:
            ReconcileResult with the all-time and current-period summaries.
        """
        as_of = as_of or datetime.now()
        current_period = period_key(as_of)
        state = self._load(user_key)
        events = state.get("events", {})

        periods: Dict[str, Dict[str, Decimal]] = {current_period: _empty_buckets()}

        for event in events.values():
            buckets = periods.setdefault(event["period"], _empty_buckets())
            buckets[SavingType(event["type"]).bucket] += Decimal(event["amount"])

        for t in transactions:
            reduced = t.reduced_by
            if reduced > 0:
                buckets = periods.setdefault(period_key(t.occurred_at), _empty_buckets())
                buckets["reduced"] += reduced

        totals = _empty_buckets()
        for buckets in periods.values():
            for name, value in buckets.items():
                totals[name] += value

        summary = _summarize(totals)
        new_state = {
            "periods": {
                period: {name: str(value) for name, value in buckets.items()}
                for period, buckets in sorted(periods.items())
            },
            "events": events,
            "total": str(summary.total),
        }
        self.store.set(ledger_key(user_key), new_state)

        logger.debug(
            f"Reconciled ledger for {normalize_user_key(user_key)}: "
            f"total={summary.total}"
        )
        return ReconcileResult(
            summary=summary,
            current=_summarize(periods[current_period]),
            state=new_state,
        )
