"""
Chat completion adapter over casual-llm providers.
"""

import logging
from typing import List, Optional

from casual_llm import ChatMessage, LLMProvider

from raven_rag.errors import RateLimited, UpstreamUnavailable

logger = logging.getLogger(__name__)


def is_rate_limit_error(error: BaseException) -> bool:
    """Whether a provider error reports rate or quota exhaustion (HTTP 429)."""
    if getattr(error, "status_code", None) == 429:
        return True
    response = getattr(error, "response", None)
    if getattr(response, "status_code", None) == 429:
        return True
    return type(error).__name__ == "RateLimitError"


class LLMProviderCompletion:
    """
    ChatCompletion implementation backed by a casual-llm LLMProvider.

    Provider errors are translated into RateLimited or UpstreamUnavailable;
    nothing is retried here.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        model_name: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        """
        Initialize the adapter.

        Args:
            llm_provider: LLM provider instance
            model_name: Name of the model (for logging)
            temperature: Sampling temperature (None = provider default)
            max_tokens: Reply length limit (None = provider default)
        """
        self.llm_provider = llm_provider
        self._model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens

        logger.info(f"LLMProviderCompletion initialized: model={model_name}")

    @property
    def model_name(self) -> str:
        return self._model_name

    async def complete(self, messages: List[ChatMessage]) -> str:
        kwargs = {"response_format": "text"}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        if self.max_tokens is not None:
            kwargs["max_tokens"] = self.max_tokens

        try:
            response = await self.llm_provider.chat(messages, **kwargs)
        except Exception as e:
            if is_rate_limit_error(e):
                logger.warning(f"Completion rate limited ({self._model_name}): {e}")
                raise RateLimited() from e
            logger.error(f"Completion request failed ({self._model_name}): {e}")
            raise UpstreamUnavailable() from e

        content = getattr(response, "content", None)
        if not content or not content.strip():
            logger.error(f"Completion from {self._model_name} was empty")
            raise UpstreamUnavailable("AI service returned an empty answer")

        logger.debug(f"Completion from {self._model_name}: {len(content)} chars")
        return content
