"""Chat completion protocol for raven-rag."""

from typing import List, Protocol

from casual_llm import ChatMessage
from typing_extensions import runtime_checkable


@runtime_checkable
class ChatCompletion(Protocol):
    """
    Protocol for chat completion providers.

    Given the assembled message sequence (system, history, new user turn),
    returns the generated reply text.
    """

    @property
    def model_name(self) -> str:
        ...

    async def complete(self, messages: List[ChatMessage]) -> str:
        """
        Generate a reply.

        Args:
            messages: Ordered message sequence

        Returns:
            Reply text

        Raises:
            RateLimited: If the provider reports rate or quota exhaustion
            UpstreamUnavailable: If the provider fails or returns nothing
        """
        ...
