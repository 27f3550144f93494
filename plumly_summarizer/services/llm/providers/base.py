"""Abstract LLM Provider Interface

This module defines:
- LLMResponse: Standardized response dataclass
- LLMProvider: Abstract base class for all providers
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from plumly_summarizer.models.llm import RateLimitInfo


@dataclass
class LLMResponse:
    """Standardized response from a text-completion provider.

    Attributes:
        content: The generated text content
        input_tokens: Number of input tokens consumed
        output_tokens: Number of output tokens generated
        model: The model identifier used
        provider: The provider name
        latency_ms: Request latency in milliseconds
        finish_reason: Why generation stopped (end_turn, max_tokens, etc.)
        timestamp: When the response was received
        rate_limit: Rate limit snapshot from response headers, if reported
    """

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    provider: str
    latency_ms: float
    finish_reason: Optional[str] = None
    timestamp: Optional[datetime] = None
    rate_limit: Optional[RateLimitInfo] = None

    @property
    def total_tokens(self) -> int:
        """Total tokens used (input + output)."""
        return self.input_tokens + self.output_tokens


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Implementations translate their SDK failures into the closed error set
    in ``services.llm.exceptions`` (ProviderAPIError, NetworkError) and raise
    ResponseFormatError for non-text output.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'anthropic')."""
        pass  # pragma: no cover - abstract method, always overridden

    @property
    @abstractmethod
    def model(self) -> str:
        """Current model identifier."""
        pass  # pragma: no cover - abstract method, always overridden

    @abstractmethod
    async def complete(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        max_tokens: int,
    ) -> LLMResponse:
        """Generate text for a system + user prompt pair.

        Args:
            system_prompt: System instructions (None to omit)
            user_prompt: The user prompt
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with generated text content

        Raises:
            ProviderAPIError: When the provider reports a typed error
            NetworkError: On connection reset or timeout
            ResponseFormatError: When the response is not text
        """
        pass  # pragma: no cover - abstract method, always overridden
