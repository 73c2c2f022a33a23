"""Best-effort gateway between the app and an advisory provider.

Nothing here raises provider errors. A failed or disabled provider yields
a neutral fallback, and the rule engine never waits on the advisor.

Background analyses are numbered. Starting a new one cancels the one still
running, and a result is only merged if no newer request has been merged
already, so a slow response can never overwrite fresher state.
"""

import asyncio
from typing import Callable, List, Optional

from llm.providers.base import AdvisoryProvider, AnalysisResult, ChatReply
from logger import get_logger
from models.transaction import Transaction

logger = get_logger("advisor")

FALLBACK_EXPLANATION = (
    "I will watch your spending patterns and suggest gentle improvements."
)
FALLBACK_CHAT_REPLY = "I had trouble reaching the AI service. Try again shortly."


def fallback_analysis() -> AnalysisResult:
    return AnalysisResult(suggestions=[], short_explanations=[FALLBACK_EXPLANATION])


class AdvisoryGateway:
    """Async, failure-absorbing wrapper around an AdvisoryProvider.

    Args:
        provider: The provider to call, or None when the advisor is disabled.
        on_update: Optional callback invoked with every merged background result.
    """

    def __init__(
        self,
        provider: Optional[AdvisoryProvider],
        on_update: Optional[Callable[[AnalysisResult], None]] = None,
    ):
        self.provider = provider
        self.on_update = on_update
        self._sequence = 0
        self._applied_sequence = 0
        self._latest: Optional[AnalysisResult] = None
        self._pending: Optional[asyncio.Task] = None

    @property
    def latest(self) -> AnalysisResult:
        """Most recent merged analysis, or the fallback if none arrived yet."""
        return self._latest if self._latest is not None else fallback_analysis()

    @property
    def applied_sequence(self) -> int:
        return self._applied_sequence

    async def analyze(self, transactions: List[Transaction]) -> AnalysisResult:
        """Request an analysis; returns the fallback on any provider failure."""
        if self.provider is None:
            return fallback_analysis()
        try:
            return await asyncio.to_thread(self.provider.analyze, list(transactions))
        except Exception as e:
            logger.error(f"Advisory analysis failed: {e}")
            return fallback_analysis()

    async def chat(self, transactions: List[Transaction], question: str) -> ChatReply:
        """Ask the advisor a question; returns a fallback reply on failure."""
        if self.provider is None:
            return ChatReply(reply=FALLBACK_CHAT_REPLY)
        try:
            return await asyncio.to_thread(
                self.provider.chat, list(transactions), question
            )
        except Exception as e:
            logger.error(f"Advisory chat failed: {e}")
            return ChatReply(reply=FALLBACK_CHAT_REPLY)

    def schedule_analysis(self, transactions: List[Transaction]) -> asyncio.Task:
        """Start a background analysis, cancelling any earlier one still running.

        Must be called from within a running event loop.

        Returns:
            The task; awaiting it yields whether its result was merged.
        """
        self.cancel_pending()
        self._sequence += 1
        task = asyncio.get_running_loop().create_task(
            self._run(self._sequence, list(transactions))
        )
        self._pending = task
        return task

    def cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _run(self, sequence: int, transactions: List[Transaction]) -> bool:
        result = await self.analyze(transactions)
        return self.merge(sequence, result)

    def merge(self, sequence: int, result: AnalysisResult) -> bool:
        """Merge a result if it is newer than the last merged one.

        Returns:
            True if merged, False if discarded as stale.
        """
        if sequence <= self._applied_sequence:
            logger.debug(
                f"Discarding stale analysis #{sequence} "
                f"(already applied #{self._applied_sequence})"
            )
            return False

        self._applied_sequence = sequence
        self._latest = result
        if self.on_update is not None:
            try:
                self.on_update(result)
            except Exception as e:
                logger.warning(f"Analysis update callback failed: {e}")
        return True
