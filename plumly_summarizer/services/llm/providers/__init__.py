"""LLM Provider Implementations

This module provides the abstract provider interface and concrete implementations:
- LLMProvider: Abstract base class defining the provider contract
- LLMResponse: Standardized response from any provider
- AnthropicProvider: Claude models
"""

from plumly_summarizer.services.llm.providers.base import LLMProvider, LLMResponse
from plumly_summarizer.services.llm.providers.anthropic import AnthropicProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "AnthropicProvider",
]
