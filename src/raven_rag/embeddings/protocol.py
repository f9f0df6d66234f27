"""
Text embedding protocol for raven-rag.

Provides a unified interface for embedding text into dense vectors
for semantic similarity search.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class TextEmbedding(Protocol):
    """
    Protocol for text embedding providers.

    All implementations must:

    1. Produce vectors of one fixed dimension per deployment
    2. Raise InvalidRequest for empty text
    3. Raise UpstreamUnavailable or RateLimited when the provider fails

    Example:
        >>> embedder = OpenAIEmbedding(api_key="...")
        >>> vector = await embedder.embed_document("Adil built a RAG server")
        >>> len(vector) == embedder.dimension
        True
    """

    @property
    def dimension(self) -> int:
        """
        Vector dimension produced by this embedder.

        All entries of a knowledge store must share it.
        """
        ...

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model."""
        ...

    async def embed_document(self, text: str) -> List[float]:
        """
        Generate embedding for a knowledge snippet to be stored.

        Args:
            text: Snippet text to embed

        Returns:
            Embedding vector
        """
        ...

    async def embed_query(self, text: str) -> List[float]:
        """
        Generate embedding for a user question.

        Args:
            text: Question text to embed

        Returns:
            Embedding vector
        """
        ...
