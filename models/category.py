"""Spending categories and their metadata.

The category set is closed. Every category must have a display color, an
essential flag and an import keyword list; validate_category_tables() runs at
import time so a half-registered category fails fast.
"""

from enum import Enum
from typing import Dict, Optional, Tuple


class Category(str, Enum):
    """Spending category of a transaction."""

    FOOD = "food"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    BILLS = "bills"
    SUBSCRIPTIONS = "subscriptions"
    GROCERIES = "groceries"
    HEALTH = "health"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.value.capitalize()


CATEGORY_COLORS: Dict[Category, str] = {
    Category.FOOD: "#f97316",
    Category.TRANSPORT: "#3b82f6",
    Category.SHOPPING: "#ec4899",
    Category.ENTERTAINMENT: "#a855f7",
    Category.BILLS: "#64748b",
    Category.SUBSCRIPTIONS: "#06b6d4",
    Category.GROCERIES: "#22c55e",
    Category.HEALTH: "#ef4444",
    Category.OTHER: "#94a3b8",
}

# Discretionary categories are the only ones that can produce impulse flags.
CATEGORY_ESSENTIAL: Dict[Category, bool] = {
    Category.FOOD: False,
    Category.TRANSPORT: True,
    Category.SHOPPING: False,
    Category.ENTERTAINMENT: False,
    Category.BILLS: True,
    Category.SUBSCRIPTIONS: False,
    Category.GROCERIES: True,
    Category.HEALTH: True,
    Category.OTHER: True,
}

# Checked in declaration order; the first category with a matching keyword wins.
# OTHER is the fallback and has no keywords of its own.
CATEGORY_KEYWORDS: Dict[Category, Tuple[str, ...]] = {
    Category.FOOD: ("food", "restaurant", "cafe", "swiggy", "zomato"),
    Category.TRANSPORT: ("uber", "ola", "taxi", "bus", "metro"),
    Category.SHOPPING: ("amazon", "flipkart", "myntra", "shopping"),
    Category.ENTERTAINMENT: ("netflix", "prime", "hotstar", "movie"),
    Category.BILLS: ("electricity", "water", "gas", "internet", "phone"),
    Category.SUBSCRIPTIONS: ("subscription", "spotify", "apple music"),
    Category.GROCERIES: ("grocery", "supermarket", "bigbasket"),
    Category.HEALTH: ("hospital", "medical", "pharmacy"),
    Category.OTHER: (),
}


def validate_category_tables() -> None:
    """Ensure every metadata table covers exactly the Category enum.

    Raises:
        ValueError: If a table is missing a category or has an unknown one.
    """
    expected = set(Category)
    tables = {
        "CATEGORY_COLORS": CATEGORY_COLORS,
        "CATEGORY_ESSENTIAL": CATEGORY_ESSENTIAL,
        "CATEGORY_KEYWORDS": CATEGORY_KEYWORDS,
    }
    for name, table in tables.items():
        keys = set(table)
        if keys != expected:
            missing = sorted(c.value for c in expected - keys)
            extra = sorted(str(k) for k in keys - expected)
            raise ValueError(
                f"{name} out of sync with Category: missing={missing} extra={extra}"
            )


def parse_category(value: str) -> Optional[Category]:
    """Look up a category by its (case-insensitive) name.

    Returns:
        The Category, or None if the name is not a known category.
    """
    try:
        return Category(value.strip().lower())
    except ValueError:
        return None


def is_essential(category) -> bool:
    """Whether a category is essential. Unknown values count as essential."""
    if not isinstance(category, Category):
        category = parse_category(str(category)) if category is not None else None
        if category is None:
            return True
    return CATEGORY_ESSENTIAL[category]


validate_category_tables()
