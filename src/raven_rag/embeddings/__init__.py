"""
Text embedding gateway for raven-rag.

``build_embedding`` returns None when no API key is configured. Callers treat
an absent embedder as the UpstreamUnavailable outcome.
"""

import logging
from typing import Optional

from raven_rag.config import Settings
from raven_rag.embeddings.openai_embedding import OpenAIEmbedding
from raven_rag.embeddings.protocol import TextEmbedding

logger = logging.getLogger(__name__)

__all__ = [
    "TextEmbedding",
    "OpenAIEmbedding",
    "build_embedding",
]


def build_embedding(settings: Settings) -> Optional[TextEmbedding]:
    """Create the configured embedder, or None if it cannot be used."""
    api_key = settings.resolved_embedding_api_key
    if not api_key:
        logger.warning("No embedding API key configured, knowledge retrieval disabled")
        return None

    return OpenAIEmbedding(
        model=settings.embedding_model,
        api_key=api_key,
        base_url=settings.embedding_base_url,
        dimensions=settings.embedding_dimensions,
        timeout=settings.gateway_timeout,
    )
