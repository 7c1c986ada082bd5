"""
NegotiateAI Backend - Abstract Model Gateway Interface
=======================================================

What:  Abstract base class defining the contract for the external
       text-generation provider, plus the provider-neutral message type.
How:   Concrete gateways inherit from ModelGateway and implement complete()
       and health_check(). Pipelines only ever see this interface.
Who:   Called by AnalysisPipeline and SuggestionPipeline.
When:  Once per analyze / improve / suggestion request.

Contract summary:
    - One call to complete() is one outbound provider request: no retries,
      no caching, no shared conversation state between calls
    - Every provider-specific failure is translated into GatewayError
    - The returned string is the raw text of the first candidate; turning
      it into structured data is the Response Normalizer's job
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

VALID_ROLES = frozenset({ROLE_SYSTEM, ROLE_USER, ROLE_ASSISTANT})


@dataclass(frozen=True)
class ChatMessage:
    """
    One entry of a chat-style prompt.

    Attributes:
        role:     'system', 'user' or 'assistant'
        content:  The message text
    """

    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in VALID_ROLES:
            raise ValueError(f"Invalid chat role '{self.role}'. Must be one of: {sorted(VALID_ROLES)}")


class ModelGateway(ABC):
    """
    Abstract interface for chat-style text completion.

    Implementations:
        - GeminiGateway: Google Gemini via google-generativeai (default)
        - Tests substitute an AsyncMock with the same two coroutines
    """

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Issue one completion request and return the first candidate's text.

        Args:
            messages:     Ordered prompt; system messages first, then the
                          conversation turns.
            temperature:  Sampling temperature (0.3 for scoring, 0.7 for
                          generative tasks).
            max_tokens:   Upper bound on generated tokens.

        Returns:
            str: Raw, non-empty response text.

        Raises:
            GatewayError: The provider errored, the deadline passed, or the
                response carried no text.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is reachable and the credentials are accepted.

        What:    Lightweight connectivity test (no completion tokens spent).
        Who:     Called by the health check endpoint.
        Returns: True if reachable, False otherwise. Never raises.
        """
        ...
