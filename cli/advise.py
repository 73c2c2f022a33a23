#!/usr/bin/env python3

import asyncio

from logger import get_logger
from services.spending import owner_key

logger = get_logger()


def refresh_advice(services, user_id):
    """Run a background analysis of the user's transactions and wait for it.

    Returns:
        The advisor's latest merged analysis.
    """
    transactions = services.transactions.find_by_user(owner_key(user_id))

    async def run():
        await services.advisor.schedule_analysis(transactions)

    asyncio.run(run())
    return services.advisor.latest


def print_analysis(analysis):
    for explanation in analysis.short_explanations:
        logger.info(explanation)
    for suggestion in analysis.suggestions:
        logger.info(f"- {suggestion}")


def cmd_analyze(args, services):
    """Ask the advisor for suggestions on the user's spending."""
    print_analysis(refresh_advice(services, args.user))


def cmd_chat(args, services):
    """Ask the advisor a question."""
    transactions = services.transactions.find_by_user(owner_key(args.user))
    reply = asyncio.run(services.advisor.chat(transactions, args.question))
    logger.info(reply.reply)


def setup_parser(subparsers):
    """Setup advise subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "advise",
        help="Spending advisor",
        description="Ask the spending advisor for suggestions",
    )

    advise_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available advisor commands",
        dest="subcommand",
        required=True,
    )

    analyze_parser = advise_subparsers.add_parser(
        "analyze", help="Get suggestions for your spending"
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    chat_parser = advise_subparsers.add_parser("chat", help="Ask a question")
    chat_parser.add_argument("question", help="e.g. 'how do I cut food delivery?'")
    chat_parser.set_defaults(func=cmd_chat)
