"""Spending service: the engine wired to the stores.

Every mutation follows the same order: write the transaction set, rebuild
alerts, then reconcile the savings ledger. Caps for the next operation are
computed from the freshest alerts.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Union, TextIO

from config import Config
from engine.alerts import (
    apply_dismissals,
    bad_alerts,
    potential_savings,
    recompute_alerts,
)
from engine.caps import CapDecision, apply_cap, compute_category_cap
from engine.classifier import ClassificationFlags, classify
from engine.ledger import SavingsLedger, normalize_user_key
from engine.periods import category_spend, period_key
from ingestion.bank_csv import ingest
from logger import get_logger
from models.alert import HabitAlert
from models.category import Category
from models.savings import SavingsSummary, SavingType
from models.transaction import Source, Transaction
from services.transactions import AuthorizationError

logger = get_logger()


class ImmutableTransactionError(ValueError):
    """Imported (AUTO) transactions cannot be deleted."""


class TransactionNotFoundError(LookupError):
    pass


def owner_key(user_id: Optional[str]) -> str:
    """Case-insensitive owner key shared by the transaction store and the ledger.

    Raises:
        AuthorizationError: If user_id is blank.
    """
    if not (user_id or "").strip():
        raise AuthorizationError("User not authenticated")
    return normalize_user_key(user_id)


@dataclass
class Snapshot:
    """Everything derived from a user's transaction set at one moment."""

    transactions: List[Transaction]
    alerts: List[HabitAlert]
    savings: SavingsSummary
    month_savings: SavingsSummary

    @property
    def total_spent(self) -> Decimal:
        return sum((t.amount for t in self.transactions), Decimal("0"))

    @property
    def impulse_spending(self) -> Decimal:
        return sum(
            (t.amount for t in self.transactions if t.is_impulse), Decimal("0")
        )

    @property
    def bad_alerts(self) -> List[HabitAlert]:
        return bad_alerts(self.alerts)

    @property
    def potential_savings(self) -> Decimal:
        return potential_savings(self.alerts)

    @property
    def spending_by_category(self) -> Dict[Category, Decimal]:
        totals = {category: Decimal("0") for category in Category}
        for t in self.transactions:
            totals[t.category] += t.amount
        return {c: amount for c, amount in totals.items() if amount > 0}


@dataclass
class AddOutcome:
    """Result of adding a manual transaction.

    transaction is None when a cap blocked it entirely; decision says how much
    was blocked and how the saving was recorded.
    """

    transaction: Optional[Transaction]
    decision: CapDecision
    flags: Optional[ClassificationFlags]
    snapshot: Snapshot


@dataclass
class ImportOutcome:
    transactions: List[Transaction]
    snapshot: Snapshot


class SpendingService:
    """Coordinates classification, alerts, caps and the savings ledger.

    Args:
        transactions: TransactionService (the transaction store).
        store: Key/value store with get/set, holding ledgers and dismissals.
        config: Application configuration (rule thresholds, dismissal policy).
    """

    def __init__(self, transactions, store, config: Config):
        self.transactions = transactions
        self.store = store
        self.config = config
        self.ledger = SavingsLedger(store)

    def _dismissed(self, user_id: Optional[str]) -> List[str]:
        if not self.config.persist_dismissals:
            return []
        return list(self.store.get(f"dismissed:{normalize_user_key(user_id)}") or [])

    def _alerts(
        self, user_id: Optional[str], transactions: List[Transaction], as_of: datetime
    ) -> List[HabitAlert]:
        alerts = recompute_alerts(
            transactions,
            as_of,
            habit_threshold=self.config.habit_threshold,
            bad_alert_threshold=self.config.bad_alert_threshold,
            good_drop_ratio=self.config.good_drop_ratio,
        )
        return apply_dismissals(alerts, self._dismissed(user_id))

    def _rebuild(
        self,
        user_id: Optional[str],
        transactions: List[Transaction],
        as_of: Optional[datetime],
    ) -> Snapshot:
        as_of = as_of or datetime.now()
        alerts = self._alerts(user_id, transactions, as_of)
        result = self.ledger.reconcile(normalize_user_key(user_id), transactions, as_of)
        return Snapshot(
            transactions=transactions,
            alerts=alerts,
            savings=result.summary,
            month_savings=result.current,
        )

    def snapshot(self, user_id: str, as_of: Optional[datetime] = None) -> Snapshot:
        """Load a user's transactions and derive alerts and savings."""
        user_id = owner_key(user_id)
        return self._rebuild(user_id, self.transactions.find_by_user(user_id), as_of)

    def add_manual(
        self,
        user_id: str,
        description: str,
        amount: Decimal,
        category: Category,
        optimize: bool = False,
        at: Optional[datetime] = None,
    ) -> AddOutcome:
        """Add a transaction typed in by the user.

        With optimize on, a bad alert for the category caps the month: an
        amount that does not fit at all is blocked and recorded as a PREVENTED
        saving; one that partly fits is reduced and the transaction keeps its
        requested amount as REDUCED evidence.

        Raises:
            ValueError: If amount is not positive.
            AuthorizationError: If user_id is empty.
        """
        if amount <= 0:
            raise ValueError(f"Amount must be positive, got {amount}")
        user_id = owner_key(user_id)

        at = at or datetime.now()
        existing = self.transactions.find_by_user(user_id)

        decision = apply_cap(amount, None, Decimal("0"))
        if optimize:
            alerts = self._alerts(user_id, existing, at)
            cap = compute_category_cap(existing, bad_alerts(alerts), category, at)
            month_to_date = category_spend(existing, category, period_key(at))
            decision = apply_cap(amount, cap, month_to_date)

        if decision.is_blocked:
            self.ledger.record_saving(
                normalize_user_key(user_id),
                SavingType.PREVENTED,
                amount,
                at,
                note=description,
            )
            logger.info(
                f"Blocked {category.value} spend of {amount}: cap {decision.cap} reached"
            )
            return AddOutcome(None, decision, None, self._rebuild(user_id, existing, at))

        transaction = Transaction(
            description=description,
            amount=decision.committed,
            category=category,
            occurred_at=at,
            source=Source.MANUAL,
            requested_amount=amount if decision.is_reduced else None,
            user_id=user_id,
        )
        flags = classify(
            transaction,
            existing,
            impulse_threshold=self.config.impulse_threshold,
            habit_threshold=self.config.habit_threshold,
        )
        transaction.is_impulse = flags.impulse
        transaction = transaction.with_id(self.transactions.add(transaction))

        if decision.is_reduced:
            logger.info(
                f"Reduced {category.value} spend from {amount} to {decision.committed}"
            )
        logger.info(f"Added transaction {transaction.id} ({description}, {transaction.amount})")

        snapshot = self._rebuild(user_id, [transaction] + existing, at)
        return AddOutcome(transaction, decision, flags, snapshot)

    def import_csv(
        self,
        user_id: str,
        source: Union[str, TextIO],
        as_of: Optional[datetime] = None,
    ) -> ImportOutcome:
        """Import a bank statement. Only debit rows become transactions.

        Raises:
            CSVValidationError: If the file is invalid; nothing is stored.
            AuthorizationError: If user_id is empty.
        """
        user_id = owner_key(user_id)
        existing = self.transactions.find_by_user(user_id)
        imported = ingest(
            source,
            existing,
            user_id,
            impulse_threshold=self.config.impulse_threshold,
            habit_threshold=self.config.habit_threshold,
        )
        ids = self.transactions.add_batch(imported)
        imported = [t.with_id(i) for t, i in zip(imported, ids)]
        logger.info(f"Imported {len(imported)} transaction(s) for {user_id}")

        snapshot = self._rebuild(user_id, imported + existing, as_of)
        return ImportOutcome(imported, snapshot)

    def delete(
        self, user_id: str, transaction_id: str, as_of: Optional[datetime] = None
    ) -> Snapshot:
        """Delete one of the user's manual transactions.

        Raises:
            TransactionNotFoundError: If the user has no such transaction.
            ImmutableTransactionError: If the transaction was imported.
        """
        user_id = owner_key(user_id)
        existing = self.transactions.find_by_user(user_id)
        target = next((t for t in existing if t.id == transaction_id), None)
        if target is None:
            raise TransactionNotFoundError(f"Transaction '{transaction_id}' not found")
        if not target.is_deletable:
            raise ImmutableTransactionError(
                f"Transaction '{transaction_id}' was imported and cannot be deleted"
            )

        self.transactions.delete(user_id, transaction_id)
        logger.info(f"Deleted transaction {transaction_id}")

        remaining = [t for t in existing if t.id != transaction_id]
        return self._rebuild(user_id, remaining, as_of)

    def dismiss_alert(
        self, user_id: str, alert_id: str, as_of: Optional[datetime] = None
    ) -> Snapshot:
        """Hide an alert.

        When persist_dismissals is off the alert is only left out of the
        returned snapshot and comes back on the next rebuild.
        """
        user_id = owner_key(user_id)
        if self.config.persist_dismissals:
            key = f"dismissed:{normalize_user_key(user_id)}"
            dismissed = list(self.store.get(key) or [])
            if alert_id not in dismissed:
                dismissed.append(alert_id)
                self.store.set(key, dismissed)

        snapshot = self.snapshot(user_id, as_of)
        snapshot.alerts = [a for a in snapshot.alerts if a.id != alert_id]
        return snapshot

    def record_optimized(
        self,
        user_id: str,
        amount: Decimal,
        note: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> Snapshot:
        """Record a saving the user made outside of spending caps."""
        user_id = owner_key(user_id)
        at = at or datetime.now()
        self.ledger.record_saving(
            normalize_user_key(user_id), SavingType.OPTIMIZED, amount, at, note=note
        )
        return self.snapshot(user_id, at)
