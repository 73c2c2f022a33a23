from datetime import datetime
from decimal import Decimal

from engine.caps import apply_cap, compute_category_cap
from models.alert import HabitAlert, Severity
from models.category import Category
from models.savings import SavingType

AS_OF = datetime(2025, 3, 20)


def make_alert(category=Category.FOOD, severity=Severity.BAD, saving_potential="300"):
    return HabitAlert(
        id=f"{category.value}:habit:2025-03",
        category=category,
        period="2025-03",
        title="Frequent food spending",
        description="",
        suggestion="",
        severity=severity,
        saving_potential=Decimal(saving_potential),
    )


class TestComputeCategoryCap:
    """Tests for compute_category_cap."""

    def test_cap_is_month_spend_minus_saving_potential(self, make_transaction):
        """Test 800 spent with a 300 saving potential caps the month at 500."""
        transactions = [
            make_transaction(amount=a, occurred_at=datetime(2025, 3, d))
            for d, a in [(1, 200), (2, 200), (3, 400)]
        ]

        cap = compute_category_cap(transactions, [make_alert()], Category.FOOD, AS_OF)

        assert cap == Decimal("500")

    def test_no_bad_alert_means_no_cap(self, make_transaction):
        """Test a category without a bad alert has no cap."""
        transactions = [make_transaction(amount=800, occurred_at=datetime(2025, 3, 1))]

        assert compute_category_cap(transactions, [], Category.FOOD, AS_OF) is None
        assert (
            compute_category_cap(
                transactions, [make_alert(category=Category.SHOPPING)], Category.FOOD, AS_OF
            )
            is None
        )

    def test_warning_alert_does_not_cap(self, make_transaction):
        """Test only bad alerts produce caps."""
        transactions = [make_transaction(amount=800, occurred_at=datetime(2025, 3, 1))]
        alert = make_alert(severity=Severity.WARNING)

        assert compute_category_cap(transactions, [alert], Category.FOOD, AS_OF) is None

    def test_cap_floored_at_zero(self, make_transaction):
        """Test a saving potential above month spend gives a zero cap."""
        transactions = [make_transaction(amount=100, occurred_at=datetime(2025, 3, 1))]

        cap = compute_category_cap(
            transactions, [make_alert(saving_potential="300")], Category.FOOD, AS_OF
        )

        assert cap == Decimal("0")

    def test_higher_previous_month_is_baseline(self, make_transaction):
        """Test last month's spend is the baseline when it was higher."""
        transactions = [
            make_transaction(amount=450, occurred_at=datetime(2025, 3, 1)),
            make_transaction(amount=800, occurred_at=datetime(2025, 2, 1)),
        ]

        cap = compute_category_cap(transactions, [make_alert()], Category.FOOD, AS_OF)

        assert cap == Decimal("500")
        decision = apply_cap(Decimal("100"), cap, Decimal("450"))
        assert decision.committed == Decimal("50")
        assert decision.saving_type == SavingType.REDUCED

    def test_lower_previous_month_ignored(self, make_transaction):
        """Test a quieter last month does not lower the baseline."""
        transactions = [
            make_transaction(amount=800, occurred_at=datetime(2025, 3, 1)),
            make_transaction(amount=100, occurred_at=datetime(2025, 2, 1)),
        ]

        cap = compute_category_cap(transactions, [make_alert()], Category.FOOD, AS_OF)

        assert cap == Decimal("500")

    def test_older_months_ignored(self, make_transaction):
        """Test spend before last month plays no part."""
        transactions = [
            make_transaction(amount=800, occurred_at=datetime(2025, 3, 1)),
            make_transaction(amount=5000, occurred_at=datetime(2025, 1, 1)),
        ]

        cap = compute_category_cap(transactions, [make_alert()], Category.FOOD, AS_OF)

        assert cap == Decimal("500")


class TestApplyCap:
    """Tests for apply_cap."""

    def test_partial_fit_is_reduced(self):
        """Test cap 500, 450 spent, 100 requested: 50 committed, 50 reduced."""
        decision = apply_cap(Decimal("100"), Decimal("500"), Decimal("450"))

        assert decision.committed == Decimal("50")
        assert decision.blocked == Decimal("50")
        assert decision.saving_type == SavingType.REDUCED
        assert decision.is_reduced

    def test_no_room_is_prevented(self):
        """Test nothing left under the cap blocks the full amount."""
        decision = apply_cap(Decimal("75"), Decimal("500"), Decimal("500"))

        assert decision.committed == Decimal("0")
        assert decision.blocked == Decimal("75")
        assert decision.saving_type == SavingType.PREVENTED
        assert decision.is_blocked

    def test_overspent_cap_is_prevented(self):
        """Test spend already above the cap still blocks."""
        decision = apply_cap(Decimal("10"), Decimal("500"), Decimal("900"))

        assert decision.is_blocked
        assert decision.blocked == Decimal("10")

    def test_fits_under_cap(self):
        """Test an amount within the remaining room passes unchanged."""
        decision = apply_cap(Decimal("40"), Decimal("500"), Decimal("450"))

        assert decision.committed == Decimal("40")
        assert decision.blocked == Decimal("0")
        assert decision.saving_type is None
        assert decision.cap == Decimal("500")

    def test_exact_fit(self):
        """Test an amount equal to the remaining room is not reduced."""
        decision = apply_cap(Decimal("50"), Decimal("500"), Decimal("450"))

        assert decision.committed == Decimal("50")
        assert decision.saving_type is None

    def test_no_cap(self):
        """Test no cap leaves the amount alone."""
        decision = apply_cap(Decimal("1000"), None, Decimal("99999"))

        assert decision.committed == Decimal("1000")
        assert decision.saving_type is None
        assert decision.cap is None
