#!/usr/bin/env python3

from cli.expenses import positive_amount
from logger import get_logger

logger = get_logger()


def cmd_summary(args, services):
    """Show the savings ledger summary."""
    snapshot = services.spending.snapshot(args.user)

    for title, summary in (
        ("This month", snapshot.month_savings),
        ("All time", snapshot.savings),
    ):
        logger.info(f"{title}:")
        logger.info(f"  Prevented: {summary.prevented:>10.2f}")
        logger.info(f"  Reduced:   {summary.reduced:>10.2f}")
        logger.info(f"  Optimized: {summary.optimized:>10.2f}")
        logger.info(f"  Total:     {summary.total:>10.2f}")


def cmd_record(args, services):
    """Record a saving made outside of spending caps."""
    snapshot = services.spending.record_optimized(args.user, args.amount, note=args.note)
    logger.info(f"✓ Recorded saving of {args.amount:.2f}")
    logger.info(f"  Total saved: {snapshot.savings.total:.2f}")


def setup_parser(subparsers):
    """Setup savings subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "savings",
        help="Savings ledger",
        description="Show and record savings",
    )

    savings_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available savings commands",
        dest="subcommand",
        required=True,
    )

    summary_parser = savings_subparsers.add_parser("summary", help="Show savings")
    summary_parser.set_defaults(func=cmd_summary)

    record_parser = savings_subparsers.add_parser(
        "record", help="Record an optimized saving"
    )
    record_parser.add_argument("amount", type=positive_amount, help="Amount saved")
    record_parser.add_argument("--note", help="What the saving was")
    record_parser.set_defaults(func=cmd_record)
