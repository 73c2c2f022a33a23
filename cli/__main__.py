#!/usr/bin/env python3
"""
Spendguard CLI - track spending, habit alerts and savings from the command line.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    expenses     Add, list, delete and import transactions
    alerts       Show and dismiss habit alerts
    savings      Show and record savings
    advise       Ask the spending advisor
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli expenses add "Zomato dinner" 650 food --optimize
    python -m cli expenses import statement.csv
    python -m cli alerts list
    python -m cli savings summary --user alice@example.com
"""

import sys
import argparse
from cli import advise, alerts, expenses, migrate, savings
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging

_SERVICE_COMMANDS = ("expenses", "alerts", "savings", "advise")


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Spendguard - impulse and habit tracking with spending caps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--user",
        help="User id to act as (defaults to default_user from config)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    expenses.setup_parser(subparsers)
    alerts.setup_parser(subparsers)
    savings.setup_parser(subparsers)
    advise.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config()
        setup_logging(config)
        args.user = args.user or config.default_user

        if args.command in _SERVICE_COMMANDS:
            args.func(args, Services(config))
        elif args.command == "migrate":
            # Migrate commands need db_manager for raw database operations
            args.func(args, DatabaseManager(config))
        else:
            args.func(args)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
