#!/usr/bin/env python3

import json

from logger import get_logger

logger = get_logger()

_SEVERITY_MARKS = {"bad": "!!", "warning": "! ", "good": "+ "}


def print_alerts(alerts):
    if not alerts:
        logger.info("No alerts this month.")
        return

    for alert in alerts:
        mark = _SEVERITY_MARKS[alert.severity.value]
        logger.info(f"{mark} {alert.title}  [{alert.id}]")
        logger.info(f"   {alert.description}")
        logger.info(f"   Tip: {alert.suggestion}")
        if alert.saving_potential > 0:
            logger.info(f"   Could save {alert.saving_potential:.0f}/month")


def cmd_list(args, services):
    """Show this month's alerts."""
    snapshot = services.spending.snapshot(args.user)
    alerts = snapshot.bad_alerts if args.bad_only else snapshot.alerts
    if args.json:
        print(json.dumps([a.to_dict() for a in alerts], indent=2))
        return

    print_alerts(alerts)

    if snapshot.bad_alerts:
        logger.info(
            f"\n{len(snapshot.bad_alerts)} bad habit(s), potential savings "
            f"{snapshot.potential_savings:.0f}/month"
        )


def cmd_dismiss(args, services):
    """Dismiss an alert by its ID."""
    snapshot = services.spending.dismiss_alert(args.user, args.alert_id)
    if services.config.persist_dismissals:
        logger.info("✓ Alert dismissed")
    else:
        logger.info(
            "✓ Alert dismissed for now. It returns while the pattern holds "
            "(set rules.persist_dismissals to keep it hidden)."
        )
    print_alerts(snapshot.alerts)


def setup_parser(subparsers):
    """Setup alerts subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "alerts",
        help="Habit alerts",
        description="Show and dismiss habit alerts for the current month",
    )

    alerts_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available alert commands",
        dest="subcommand",
        required=True,
    )

    list_parser = alerts_subparsers.add_parser("list", help="List alerts")
    list_parser.add_argument(
        "--bad-only", action="store_true", help="Only show bad habit alerts"
    )
    list_parser.add_argument("--json", action="store_true", help="Print alerts as JSON")
    list_parser.set_defaults(func=cmd_list)

    dismiss_parser = alerts_subparsers.add_parser("dismiss", help="Dismiss an alert")
    dismiss_parser.add_argument("alert_id", help="Alert ID as shown by 'alerts list'")
    dismiss_parser.set_defaults(func=cmd_dismiss)
