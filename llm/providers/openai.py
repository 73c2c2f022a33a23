"""OpenAI advisory provider using structured outputs."""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional

from openai import OpenAI
from pydantic import BaseModel

from llm.prompts.loader import PromptManager
from llm.providers.base import AdvisoryProvider, AnalysisResult, ChatReply
from logger import get_logger
from models.transaction import Transaction

logger = get_logger()

# Keep prompts bounded for large histories
_MAX_RECENT_TRANSACTIONS = 50


# Pydantic models for structured output
class AnalysisResponse(BaseModel):
    suggestions: List[str]
    short_explanations: List[str]


class ChatResponse(BaseModel):
    reply: str


class OpenAIProvider(AdvisoryProvider):
    """OpenAI implementation using structured outputs for reliable JSON parsing."""

    def __init__(self, api_key: str, model: Optional[str] = None):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key.
            model: Model to use (e.g., "gpt-4o-mini"). If None, uses prompt default.
        """
        self.client = OpenAI(api_key=api_key)
        self.model = model
        self.prompt_manager = PromptManager()

    def analyze(self, transactions: List[Transaction]) -> AnalysisResult:
        if not transactions:
            return AnalysisResult()

        logger.info(f"Calling OpenAI to analyze {len(transactions)} transaction(s)")
        parsed = self._parse(
            "analysis",
            {
                "category_totals": self._format_category_totals(transactions),
                "transactions": self._format_transactions(transactions),
            },
            AnalysisResponse,
        )
        if parsed is None:
            logger.warning("OpenAI returned null parsed analysis")
            return AnalysisResult()

        return AnalysisResult(
            suggestions=list(parsed.suggestions),
            short_explanations=list(parsed.short_explanations),
        )

    def chat(self, transactions: List[Transaction], question: str) -> ChatReply:
        logger.info("Calling OpenAI for a chat reply")
        parsed = self._parse(
            "chat",
            {
                "category_totals": self._format_category_totals(transactions),
                "transactions": self._format_transactions(transactions),
                "question": question,
            },
            ChatResponse,
        )
        if parsed is None:
            raise ValueError("OpenAI returned null parsed chat reply")
        return ChatReply(reply=parsed.reply)

    def _parse(self, prompt_name: str, variables: dict, response_format):
        rendered_prompt = self.prompt_manager.render_prompt(prompt_name, variables)

        model = self.model or rendered_prompt["parameters"].get("model", "gpt-4o-mini")
        temperature = rendered_prompt["parameters"].get("temperature", 0.4)
        max_tokens = rendered_prompt["parameters"].get("max_tokens", 1000)

        logger.info(
            f"Using model: {model}, prompt {prompt_name} version: {rendered_prompt['version']}"
        )

        try:
            response = self.client.beta.chat.completions.parse(
                model=model,
                messages=[
                    {"role": "system", "content": rendered_prompt["system_prompt"]},
                    {"role": "user", "content": rendered_prompt["user_prompt"]},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                response_format=response_format,
            )
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise

        return response.choices[0].message.parsed

    def _format_category_totals(self, transactions: List[Transaction]) -> str:
        if not transactions:
            return "No spending recorded."

        totals: Dict[str, Decimal] = defaultdict(Decimal)
        for txn in transactions:
            totals[txn.category.value] += txn.amount

        return "\n".join(
            f"- {category}: {amount:.2f}"
            for category, amount in sorted(totals.items(), key=lambda kv: -kv[1])
        )

    def _format_transactions(self, transactions: List[Transaction]) -> str:
        if not transactions:
            return "No transactions."

        lines = []
        for txn in transactions[:_MAX_RECENT_TRANSACTIONS]:
            impulse = ", impulse" if txn.is_impulse else ""
            lines.append(
                f"- {txn.occurred_at.date().isoformat()}: '{txn.description}', "
                f"{txn.amount:.2f}, {txn.category.value}{impulse}"
            )
        return "\n".join(lines)
