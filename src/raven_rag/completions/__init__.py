"""
Chat completion gateway for raven-rag.

``build_completion`` returns None when the configured provider cannot be
used. Callers treat an absent gateway as the UpstreamUnavailable outcome.
"""

import logging
from typing import Optional

from casual_llm import ModelConfig, Provider, create_provider

from raven_rag.completions.llm_provider import LLMProviderCompletion, is_rate_limit_error
from raven_rag.completions.protocol import ChatCompletion
from raven_rag.config import Settings

logger = logging.getLogger(__name__)

__all__ = [
    "ChatCompletion",
    "LLMProviderCompletion",
    "build_completion",
    "is_rate_limit_error",
]


def build_completion(settings: Settings) -> Optional[ChatCompletion]:
    """Create the configured completion gateway, or None if it cannot be used."""
    if settings.chat_provider == "ollama":
        model_config = ModelConfig(
            name=settings.chat_model,
            provider=Provider.OLLAMA,
            base_url=settings.chat_base_url,
        )
    else:
        api_key = settings.resolved_chat_api_key
        if not api_key:
            logger.warning("No chat API key configured, chat disabled")
            return None
        model_config = ModelConfig(
            name=settings.chat_model,
            provider=Provider.OPENAI,
            base_url=settings.chat_base_url,
            api_key=api_key,
        )

    return LLMProviderCompletion(
        create_provider(model_config),
        settings.chat_model,
        temperature=settings.chat_temperature,
    )
