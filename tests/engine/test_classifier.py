from datetime import datetime
from decimal import Decimal

import pytest

from engine.classifier import classify, count_same_category_in_month, is_impulse
from models.category import Category


class TestImpulse:
    """Tests for the impulse half of classify()."""

    @pytest.mark.parametrize(
        "category",
        [Category.FOOD, Category.SHOPPING, Category.ENTERTAINMENT, Category.SUBSCRIPTIONS],
    )
    def test_non_essential_above_threshold_is_impulse(self, make_transaction, category):
        """Test a non-essential purchase above 500 is flagged."""
        t = make_transaction(amount="500.01", category=category)

        assert classify(t, []).impulse is True

    def test_threshold_is_exclusive(self, make_transaction):
        """Test exactly 500 is not an impulse."""
        t = make_transaction(amount="500", category=Category.SHOPPING)

        assert classify(t, []).impulse is False

    @pytest.mark.parametrize(
        "category",
        [Category.BILLS, Category.GROCERIES, Category.HEALTH, Category.TRANSPORT, Category.OTHER],
    )
    def test_essential_never_impulse(self, make_transaction, category):
        """Test essential categories are never impulse purchases."""
        t = make_transaction(amount="5000", category=category)

        assert is_impulse(t) is False

    def test_unknown_category_degrades_to_essential(self, make_transaction):
        """Test an unrecognized category value does not raise or flag."""
        t = make_transaction(amount="9999")
        t.category = "yachts"

        assert is_impulse(t) is False

    def test_custom_threshold(self, make_transaction):
        """Test the threshold can be overridden."""
        t = make_transaction(amount="150", category=Category.FOOD)

        assert classify(t, [], impulse_threshold=Decimal("100")).impulse is True


class TestHabit:
    """Tests for the habit half of classify()."""

    def _history(self, make_transaction, count, category=Category.FOOD, month=3):
        return [
            make_transaction(
                category=category,
                occurred_at=datetime(2025, month, day + 1, 9, 0),
                id=f"h{month}-{day}",
            )
            for day in range(count)
        ]

    def test_third_occurrence_is_not_habit(self, make_transaction):
        """Test two earlier occurrences plus the candidate does not trigger."""
        history = self._history(make_transaction, 2)
        candidate = make_transaction(occurred_at=datetime(2025, 3, 20))

        assert classify(candidate, history).habit is False

    def test_fourth_occurrence_is_habit(self, make_transaction):
        """Test three earlier occurrences plus the candidate triggers."""
        history = self._history(make_transaction, 3)
        candidate = make_transaction(occurred_at=datetime(2025, 3, 20))

        assert classify(candidate, history).habit is True

    def test_other_months_do_not_count(self, make_transaction):
        """Test occurrences from the previous month are ignored."""
        history = self._history(make_transaction, 5, month=2)
        candidate = make_transaction(occurred_at=datetime(2025, 3, 20))

        assert classify(candidate, history).habit is False

    def test_other_categories_do_not_count(self, make_transaction):
        """Test occurrences in a different category are ignored."""
        history = self._history(make_transaction, 5, category=Category.TRANSPORT)
        candidate = make_transaction(occurred_at=datetime(2025, 3, 20))

        assert classify(candidate, history).habit is False

    def test_candidate_in_history_counted_once(self, make_transaction):
        """Test a persisted candidate that also appears in history is not double counted."""
        history = self._history(make_transaction, 3)
        candidate = history[-1]

        assert count_same_category_in_month(candidate, history) == 3
        assert classify(candidate, history).habit is False

    def test_flags_are_independent(self, make_transaction):
        """Test a cheap habitual purchase is a habit but not an impulse."""
        history = self._history(make_transaction, 3)
        candidate = make_transaction(amount="40", occurred_at=datetime(2025, 3, 25))

        flags = classify(candidate, history)

        assert flags.habit is True
        assert flags.impulse is False
