"""Habit alert model."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from models.category import Category


class Severity(str, Enum):
    """How an alert should be presented. Only BAD alerts drive spending caps."""

    BAD = "bad"
    WARNING = "warning"
    GOOD = "good"


@dataclass(frozen=True)
class HabitAlert:
    """A behavioral alert derived from the transaction set.

    Attributes:
        id: Deterministic key from (category, title template, period).
        category: Category the alert is about.
        period: Calendar month the alert covers, "YYYY-MM".
        title: Short human-readable title.
        description: Longer explanation of the pattern.
        suggestion: What the user could do about it.
        severity: bad, warning or good.
        saving_potential: Estimated monthly amount recoverable by correcting the habit.
    """

    id: str
    category: Category
    period: str
    title: str
    description: str
    suggestion: str
    severity: Severity
    saving_potential: Decimal

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category.value,
            "period": self.period,
            "title": self.title,
            "description": self.description,
            "suggestion": self.suggestion,
            "severity": self.severity.value,
            "saving_potential": float(self.saving_potential),
        }
