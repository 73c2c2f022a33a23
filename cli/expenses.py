#!/usr/bin/env python3

import argparse
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

from cli.advise import print_analysis, refresh_advice
from ingestion.bank_csv import CSVValidationError
from logger import get_logger
from models.category import Category
from services.spending import ImmutableTransactionError, TransactionNotFoundError

logger = get_logger()


def positive_amount(value: str) -> Decimal:
    """argparse type for a positive decimal amount."""
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value}") from None
    if not amount.is_finite() or amount <= 0:
        raise argparse.ArgumentTypeError(f"amount must be positive: {value}")
    return amount


def print_savings(snapshot):
    savings = snapshot.savings
    logger.info(
        f"Saved so far: {savings.total:.0f} (prevented {savings.prevented:.0f}, "
        f"reduced {savings.reduced:.0f}, optimized {savings.optimized:.0f})"
    )


def print_advice(args, services):
    """Refresh and show the advisor's take when an advisor is configured."""
    if services.advisor.provider is None:
        return
    print_analysis(refresh_advice(services, args.user))


def cmd_list(args, services):
    """List the user's transactions, newest first."""
    snapshot = services.spending.snapshot(args.user)
    transactions = snapshot.transactions[: args.limit] if args.limit else snapshot.transactions

    if args.json:
        print(json.dumps([t.to_dict() for t in transactions], indent=2))
        return

    if not transactions:
        logger.info("No transactions found.")
        return

    for t in transactions:
        flags = " [impulse]" if t.is_impulse else ""
        logger.info(
            f"{t.id}  {t.occurred_at:%Y-%m-%d}  {t.amount:>10.2f}  "
            f"{t.category.value:<13} {t.source.value:<6} {t.description}{flags}"
        )

    logger.info(
        f"\nTotal spent: {snapshot.total_spent:.2f}, "
        f"impulse: {snapshot.impulse_spending:.2f}"
    )


def cmd_add(args, services):
    """Add a manual transaction, applying spending caps if --optimize is set."""
    outcome = services.spending.add_manual(
        args.user,
        args.description,
        args.amount,
        Category(args.category),
        optimize=args.optimize,
    )
    decision = outcome.decision

    if outcome.transaction is None:
        logger.info(
            f"Spending capped: this {args.category} expense was blocked. "
            f"{decision.blocked:.0f} counted as saved."
        )
    else:
        if decision.is_reduced:
            logger.info(
                f"Spending optimized: reduced by {decision.blocked:.0f} "
                f"and counted as saved."
            )
        t = outcome.transaction
        logger.info(f"✓ Added {t.description} - {t.amount:.0f} ({t.category.value})")
        if outcome.flags.impulse:
            logger.info("  Flagged as an impulse purchase")
        if outcome.flags.habit:
            logger.info(f"  {t.category.label} is becoming a habit this month")

    print_savings(outcome.snapshot)
    print_advice(args, services)


def cmd_delete(args, services):
    """Delete a manual transaction."""
    try:
        snapshot = services.spending.delete(args.user, args.transaction_id)
    except (TransactionNotFoundError, ImmutableTransactionError) as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info("✓ Transaction deleted")
    print_savings(snapshot)
    print_advice(args, services)


def cmd_import(args, services):
    """Import debit rows from a bank statement CSV."""
    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        logger.error(f"File not found: {args.csv_file}")
        sys.exit(1)

    try:
        with open(csv_path, "r", newline="") as f:
            outcome = services.spending.import_csv(args.user, f)
    except CSVValidationError as e:
        logger.error(f"Upload failed: {e}")
        sys.exit(1)

    count = len(outcome.transactions)
    logger.info(f"✓ Imported {count} debit transaction{'' if count == 1 else 's'}")
    impulse = sum(1 for t in outcome.transactions if t.is_impulse)
    if impulse:
        logger.info(f"  {impulse} flagged as impulse purchases")
    print_advice(args, services)


def setup_parser(subparsers):
    """Setup expenses subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "expenses",
        help="Manage transactions",
        description="Add, list, delete and import transactions",
    )

    expenses_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available expense commands",
        dest="subcommand",
        required=True,
    )

    list_parser = expenses_subparsers.add_parser("list", help="List transactions")
    list_parser.add_argument(
        "--limit", type=int, default=None, help="Show only the newest N transactions"
    )
    list_parser.add_argument(
        "--json", action="store_true", help="Print transactions as JSON"
    )
    list_parser.set_defaults(func=cmd_list)

    add_parser = expenses_subparsers.add_parser("add", help="Add a manual transaction")
    add_parser.add_argument("description", help="What the money was spent on")
    add_parser.add_argument("amount", type=positive_amount, help="Amount spent")
    add_parser.add_argument(
        "category", choices=[c.value for c in Category], help="Spending category"
    )
    add_parser.add_argument(
        "--optimize",
        action="store_true",
        help="Enforce caps from bad habit alerts before recording",
    )
    add_parser.set_defaults(func=cmd_add)

    delete_parser = expenses_subparsers.add_parser(
        "delete", help="Delete a manual transaction by ID"
    )
    delete_parser.add_argument("transaction_id", help="ID of the transaction")
    delete_parser.set_defaults(func=cmd_delete)

    import_parser = expenses_subparsers.add_parser(
        "import", help="Import a bank statement CSV (date,description,amount,type)"
    )
    import_parser.add_argument("csv_file", help="Path to the CSV file")
    import_parser.set_defaults(func=cmd_import)
