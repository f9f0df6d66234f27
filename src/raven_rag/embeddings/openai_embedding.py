"""OpenAI embedding adapter for raven-rag."""

import logging
from typing import Dict, List, Optional

import openai
from openai import AsyncOpenAI

from raven_rag.errors import InvalidRequest, RateLimited, UpstreamUnavailable

logger = logging.getLogger(__name__)

KNOWN_DIMENSIONS: Dict[str, int] = {
    "text-embedding-004": 768,
    "gemini-embedding-001": 3072,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbedding:
    """
    Embedding adapter using the OpenAI embeddings API.

    Works with any OpenAI-compatible endpoint. The default configuration
    points at Gemini's OpenAI-compatible endpoint with ``text-embedding-004``.

    Requests are not retried by the client: a failed call surfaces to the
    caller as UpstreamUnavailable (or RateLimited) and the caller decides
    whether to retry.

    Example:
        >>> embedder = OpenAIEmbedding(
        ...     model="text-embedding-3-small",
        ...     dimensions=768,
        ...     api_key="sk-..."
        ... )
        >>> vector = await embedder.embed_document("I like pizza")
        >>> len(vector)
        768
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize OpenAI embedder.

        Args:
            model: Embedding model name
            api_key: API key (None = use OPENAI_API_KEY env var)
            base_url: Custom endpoint (None = official OpenAI)
            dimensions: Requested output dimension (models that support shortening only)
            timeout: Request timeout in seconds
            client: Pre-built client (tests, shared connection pools)
        """
        self._model = model
        self._dimensions = dimensions

        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

        # Unknown models report their dimension after the first call
        self._dimension = dimensions or KNOWN_DIMENSIONS.get(model, 0)
        if not self._dimension:
            logger.warning(f"Unknown embedding model {model}, dimension learned on first call")

        logger.info(f"OpenAI embedder initialized: {model} ({self._dimension or '?'} dimensions)")

    @property
    def dimension(self) -> int:
        """Vector dimension produced by this model (0 while still unknown)."""
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model

    async def _embed_single(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise InvalidRequest("Cannot embed empty text")

        kwargs = {"model": self._model, "input": text}
        if self._dimensions is not None:
            kwargs["dimensions"] = self._dimensions

        try:
            response = await self._client.embeddings.create(**kwargs)
        except openai.RateLimitError as e:
            logger.warning(f"Embedding rate limited ({self._model}): {e}")
            raise RateLimited() from e
        except openai.OpenAIError as e:
            logger.error(f"Embedding request failed ({self._model}): {e}")
            raise UpstreamUnavailable() from e

        if not response.data:
            logger.error(f"Embedding response from {self._model} carried no vectors")
            raise UpstreamUnavailable()

        vector = list(response.data[0].embedding)
        if not self._dimension:
            self._dimension = len(vector)
        return vector

    async def embed_document(self, text: str) -> List[float]:
        """
        Generate embedding for a knowledge snippet.

        OpenAI models don't distinguish documents from queries, so this is
        identical to embed_query().

        Raises:
            InvalidRequest: If text is empty
            RateLimited: If the API reports rate exhaustion
            UpstreamUnavailable: If the API request fails
        """
        return await self._embed_single(text)

    async def embed_query(self, text: str) -> List[float]:
        """Generate embedding for a question. See embed_document()."""
        return await self._embed_single(text)
