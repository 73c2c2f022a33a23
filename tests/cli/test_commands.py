import json
import logging
from argparse import Namespace
from datetime import datetime
from decimal import Decimal

import pytest

from cli import advise, alerts, expenses
from llm.providers.base import AdvisoryProvider, AnalysisResult, ChatReply
from models.category import Category
from services.base import Services


class CountingProvider(AdvisoryProvider):
    """Provider recording how many transactions each analysis saw."""

    def __init__(self):
        self.seen = []

    def analyze(self, transactions):
        self.seen.append(len(transactions))
        return AnalysisResult(
            suggestions=["Cook dinner twice a week"],
            short_explanations=["Food delivery is your biggest habit"],
        )

    def chat(self, transactions, question):
        return ChatReply(reply="Try a weekly food budget")


@pytest.fixture
def provider():
    return CountingProvider()


@pytest.fixture
def advised_services(test_config, db_manager_with_schema, provider):
    return Services(test_config, db_manager=db_manager_with_schema, advisory_provider=provider)


def add_args(**kwargs):
    defaults = dict(
        user="alice",
        description="Pizza",
        amount=Decimal("300"),
        category="food",
        optimize=False,
    )
    defaults.update(kwargs)
    return Namespace(**defaults)


class TestJsonOutput:
    """Tests for --json on the list commands."""

    def test_expenses_list_json(self, services, capsys):
        """Test transactions are printed as a JSON array of dicts."""
        services.spending.add_manual(
            "alice", "Metro card", Decimal("200"), Category.TRANSPORT, at=datetime(2025, 3, 2)
        )

        expenses.cmd_list(Namespace(user="Alice", limit=None, json=True), services)

        (row,) = json.loads(capsys.readouterr().out)
        assert row["description"] == "Metro card"
        assert row["amount"] == 200.0
        assert row["category"] == "transport"
        assert row["source"] == "manual"
        assert row["user_id"] == "alice"
        assert row["occurred_at"] == "2025-03-02T00:00:00"

    def test_expenses_list_json_respects_limit(self, services, capsys):
        """Test --limit applies before JSON output."""
        for day in (1, 2, 3):
            services.spending.add_manual(
                "alice", f"Cab {day}", Decimal("50"), Category.TRANSPORT, at=datetime(2025, 3, day)
            )

        expenses.cmd_list(Namespace(user="alice", limit=2, json=True), services)

        rows = json.loads(capsys.readouterr().out)
        assert [r["description"] for r in rows] == ["Cab 3", "Cab 2"]

    def test_alerts_list_json(self, services, capsys):
        """Test this month's alerts are printed as JSON."""
        now = datetime.now()
        for n in range(5):
            services.spending.add_manual(
                "alice", f"Dinner {n}", Decimal("400"), Category.FOOD, at=now
            )

        alerts.cmd_list(Namespace(user="alice", bad_only=True, json=True), services)

        (alert,) = json.loads(capsys.readouterr().out)
        assert alert["id"] == f"food:habit:{now:%Y-%m}"
        assert alert["severity"] == "bad"
        assert alert["saving_potential"] == 800.0

    def test_alerts_list_json_empty(self, services, capsys):
        """Test no alerts prints an empty array."""
        alerts.cmd_list(Namespace(user="alice", bad_only=False, json=True), services)

        assert json.loads(capsys.readouterr().out) == []


class TestRefreshAdvice:
    """Tests for background advice after changes."""

    def test_refresh_merges_latest_analysis(self, advised_services, provider):
        """Test refresh_advice runs one scheduled analysis and returns the merged result."""
        advised_services.spending.add_manual(
            "alice", "Pizza", Decimal("300"), Category.FOOD, at=datetime(2025, 3, 2)
        )

        analysis = advise.refresh_advice(advised_services, "Alice")

        assert provider.seen == [1]
        assert advised_services.advisor.applied_sequence == 1
        assert analysis.suggestions == ["Cook dinner twice a week"]

    def test_add_refreshes_advice(self, advised_services, provider, caplog):
        """Test adding an expense triggers an analysis that sees the new transaction."""
        with caplog.at_level(logging.INFO, logger="spendguard"):
            expenses.cmd_add(add_args(), advised_services)

        assert provider.seen == [1]
        assert "- Cook dinner twice a week" in caplog.text

    def test_delete_refreshes_advice(self, advised_services, provider):
        """Test each change schedules a fresh analysis."""
        added = advised_services.spending.add_manual(
            "alice", "Pizza", Decimal("300"), Category.FOOD, at=datetime(2025, 3, 2)
        )

        expenses.cmd_delete(
            Namespace(user="alice", transaction_id=added.transaction.id), advised_services
        )

        assert provider.seen == [0]
        assert advised_services.advisor.applied_sequence == 1

    def test_no_advice_without_provider(self, services, caplog):
        """Test a disabled advisor is never asked after a change."""
        with caplog.at_level(logging.INFO, logger="spendguard"):
            expenses.cmd_add(add_args(), services)

        assert services.advisor.applied_sequence == 0
        assert "Cook dinner" not in caplog.text

    def test_analyze_command(self, advised_services, provider, caplog):
        """Test 'advise analyze' logs the merged suggestions."""
        with caplog.at_level(logging.INFO, logger="spendguard"):
            advise.cmd_analyze(Namespace(user="alice"), advised_services)

        assert provider.seen == [0]
        assert "Food delivery is your biggest habit" in caplog.text
