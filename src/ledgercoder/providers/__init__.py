"""Clients for external services."""

from ledgercoder.providers.openai_suggestions import OpenAISuggestionClient

__all__ = ["OpenAISuggestionClient"]
