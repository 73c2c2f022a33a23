"""Base provider interface for spending advisors."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from models.transaction import Transaction


@dataclass
class AnalysisResult:
    """Suggestions produced by an advisor. Either list may be empty."""

    suggestions: List[str] = field(default_factory=list)
    short_explanations: List[str] = field(default_factory=list)


@dataclass
class ChatReply:
    reply: str


class AdvisoryProvider(ABC):
    """Abstract base class for advisory providers.

    Implementations are synchronous and may raise on any failure; the
    gateway runs them off the caller's path and absorbs errors.
    """

    @abstractmethod
    def analyze(self, transactions: List[Transaction]) -> AnalysisResult:
        """Suggest improvements for a user's spending.

        Args:
            transactions: The user's transactions, newest first.

        Returns:
            AnalysisResult with suggestions and short explanations.

        Raises:
            Exception: If the provider call fails.
        """

    @abstractmethod
    def chat(self, transactions: List[Transaction], question: str) -> ChatReply:
        """Answer a free-form question about the user's spending.

        Raises:
            Exception: If the provider call fails.
        """
