"""Spending advisor integration."""

from llm.factory import get_advisory_provider
from llm.gateway import AdvisoryGateway

__all__ = ["AdvisoryGateway", "get_advisory_provider"]
