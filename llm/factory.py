"""Factory for creating advisory provider instances."""

from typing import Optional

from config import Config
from llm.providers.base import AdvisoryProvider
from llm.providers.openai import OpenAIProvider
from logger import get_logger

logger = get_logger()


def get_advisory_provider(config: Config) -> Optional[AdvisoryProvider]:
    """Create an advisory provider based on configuration.

    Args:
        config: Application configuration.

    Returns:
        AdvisoryProvider instance, or None if the advisor is disabled.

    Raises:
        ValueError: If a provider is configured but its settings are invalid.
    """
    if not config.llm_enabled:
        logger.info("Spending advisor is disabled")
        return None

    provider_name = config.llm_provider

    if provider_name == "openai":
        if not config.llm_openai_api_key:
            raise ValueError(
                "OpenAI provider selected but llm openai_api_key not configured"
            )

        logger.info(
            f"Initializing OpenAI advisor (model: {config.llm_openai_model or 'default'})"
        )
        return OpenAIProvider(
            api_key=config.llm_openai_api_key, model=config.llm_openai_model or None
        )

    if not provider_name:
        logger.info("No advisory provider configured")
        return None

    raise ValueError(f"Unknown advisory provider: {provider_name}")
