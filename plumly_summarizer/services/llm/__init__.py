"""LLM Summarization Package

This package provides:
- SummaryClient: Main orchestrator for clinical summaries
- Provider implementations (Anthropic)
- Retry classification, response parsing, fallback and validation
- Prompt building

Usage:
    from plumly_summarizer.services.llm import SummaryClient
"""

from plumly_summarizer.services.llm.client import SummaryClient
from plumly_summarizer.services.llm.error_classifier import ErrorClassifier
from plumly_summarizer.services.llm.fallback import FallbackSynthesizer
from plumly_summarizer.services.llm.prompt_builder import (
    PromptBuilder,
    TemplatePromptBuilder,
    build_system_prompt,
)
from plumly_summarizer.services.llm.response_parser import ResponseParser
from plumly_summarizer.services.llm.response_validator import ResponseValidator
from plumly_summarizer.services.llm.providers.base import LLMProvider, LLMResponse
from plumly_summarizer.services.llm.exceptions import (
    LLMProviderError,
    NetworkError,
    ProviderAPIError,
    ProviderErrorType,
)

__all__ = [
    # Main client
    "SummaryClient",
    # Components
    "ErrorClassifier",
    "FallbackSynthesizer",
    "PromptBuilder",
    "TemplatePromptBuilder",
    "build_system_prompt",
    "ResponseParser",
    "ResponseValidator",
    # Provider abstractions
    "LLMProvider",
    "LLMResponse",
    # Exceptions
    "LLMProviderError",
    "NetworkError",
    "ProviderAPIError",
    "ProviderErrorType",
]
