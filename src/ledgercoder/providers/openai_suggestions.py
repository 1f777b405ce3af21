"""OpenAI-backed category suggestion client.

Sends the suggestion prompt as a single chat message and returns the raw
reply text. Interpreting the reply is left to the suggestion gateway.
"""

from typing import Any, Optional
import logging

from openai import APIError, APITimeoutError, OpenAI

from ledgercoder.config import SuggestionSettings
from ledgercoder.domain.errors import SettingsError, SuggestionServiceError

logger = logging.getLogger(__name__)


class OpenAISuggestionClient:
    """Chat completion transport for category suggestions."""

    def __init__(self, settings: SuggestionSettings, client: Optional[Any] = None):
        """Initialize the client.

        Args:
            settings: Suggestion service settings
            client: Pre-built OpenAI client (mainly for tests)

        Raises:
            SettingsError: If no API key is configured and no client is given
        """
        if client is None:
            if not settings.has_credentials:
                raise SettingsError("OpenAI API key is required (set OPENAI_API_KEY or pass --openai-api-key)")
            client = OpenAI(
                api_key=settings.api_key,
                base_url=settings.base_url,
                timeout=settings.timeout_seconds,
            )
        self._client = client
        self._model = settings.model
        self._temperature = settings.temperature

    def complete(self, prompt: str) -> Optional[str]:
        """Send a prompt and return the reply content.

        Raises:
            SuggestionServiceError: If the API call fails or times out
        """
        logger.debug("Requesting suggestion from %s", self._model)
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
            )
        except (APIError, APITimeoutError) as exc:
            logger.error("OpenAI request failed (%s): %s", type(exc).__name__, exc)
            raise SuggestionServiceError(f"OpenAI request failed: {exc}") from exc

        if not response.choices:
            logger.warning("OpenAI reply had no choices")
            return None
        content = response.choices[0].message.content
        logger.debug("OpenAI reply: %s", content)
        return content
