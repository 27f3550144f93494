"""Anthropic (Claude) Provider Implementation

Calls the Messages API and decodes SDK failures into the closed provider
error set at this boundary.
"""

import time
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

import anthropic

from plumly_summarizer.models.llm import RateLimitInfo
from plumly_summarizer.observability.logging import get_logger
from plumly_summarizer.services.llm.exceptions import (
    LLMProviderError,
    NetworkError,
    ProviderAPIError,
    ProviderErrorType,
)
from plumly_summarizer.services.llm.providers.base import LLMProvider, LLMResponse
from plumly_summarizer.utils.exceptions import ResponseFormatError

logger = get_logger("anthropic_provider")

# Error type implied by HTTP status when the body carries none
STATUS_ERROR_TYPES = {
    400: ProviderErrorType.INVALID_REQUEST,
    401: ProviderErrorType.AUTHENTICATION,
    429: ProviderErrorType.RATE_LIMIT,
    500: ProviderErrorType.API,
    529: ProviderErrorType.OVERLOADED,
}


def decode_error(error: BaseException, provider: str = "anthropic") -> BaseException:
    """Translate an SDK or transport failure into the closed error set.

    Errors that are not recognized are returned unchanged.
    """
    if isinstance(error, anthropic.APITimeoutError):
        return NetworkError("Request timed out", reason="timeout", provider=provider)

    if isinstance(error, anthropic.APIConnectionError):
        return NetworkError(str(error), reason="reset", provider=provider)

    if isinstance(error, anthropic.APIStatusError):
        raw_type, message = _error_payload(error.body)
        if raw_type is not None:
            error_type = ProviderErrorType.decode(raw_type)
        else:
            error_type = STATUS_ERROR_TYPES.get(
                error.status_code, ProviderErrorType.OTHER
            )
        return ProviderAPIError(
            message or str(error),
            error_type=error_type,
            raw_type=raw_type,
            status_code=error.status_code,
            provider=provider,
        )

    if isinstance(error, (ConnectionResetError, TimeoutError)):
        reason = "timeout" if isinstance(error, TimeoutError) else "reset"
        return NetworkError(str(error) or reason, reason=reason, provider=provider)

    return error


def _error_payload(body: Any) -> Tuple[Optional[str], Optional[str]]:
    """(type, message) from an API error body like {"error": {"type": ...}}."""
    if not isinstance(body, Mapping):
        return None, None
    inner = body.get("error")
    if isinstance(inner, Mapping):
        return inner.get("type"), inner.get("message")
    return None, None


def parse_rate_limit_headers(headers: Mapping[str, str]) -> Optional[RateLimitInfo]:
    """Build RateLimitInfo from anthropic-ratelimit-* headers, if present."""
    if "anthropic-ratelimit-requests-remaining" not in headers:
        return None

    def as_int(name: str) -> Optional[int]:
        value = headers.get(name)
        try:
            return int(value) if value is not None else None
        except ValueError:
            return None

    reset_time = None
    raw_reset = headers.get("anthropic-ratelimit-requests-reset")
    if raw_reset:
        try:
            reset_time = datetime.fromisoformat(raw_reset.replace("Z", "+00:00"))
        except ValueError:
            reset_time = None

    return RateLimitInfo(
        requests_per_minute=as_int("anthropic-ratelimit-requests-limit") or 0,
        tokens_per_minute=as_int("anthropic-ratelimit-tokens-limit") or 0,
        requests_remaining=as_int("anthropic-ratelimit-requests-remaining"),
        tokens_remaining=as_int("anthropic-ratelimit-tokens-remaining"),
        reset_time=reset_time,
    )


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider implementation.

    The SDK's own retries are disabled; retrying is owned by RetryHandler.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        temperature: float = 0.3,
        timeout_seconds: float = 30.0,
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Model identifier
            temperature: Sampling temperature (low for factual output)
            timeout_seconds: Connection-level request timeout

        Raises:
            LLMProviderError: If the API key is missing
        """
        if not api_key:
            raise LLMProviderError("Anthropic API key is required", provider="anthropic")

        self._model = model
        self.temperature = temperature
        self._client: Any = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )

    @property
    def name(self) -> str:
        """Provider name."""
        return "anthropic"

    @property
    def model(self) -> str:
        """Current model identifier."""
        return self._model

    async def complete(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        max_tokens: int,
    ) -> LLMResponse:
        """Generate text using Claude.

        Raises:
            ProviderAPIError: When the API reports an error
            NetworkError: On connection reset or timeout
            ResponseFormatError: When the first content block is not text
        """
        start_time = time.time()
        params: dict = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if system_prompt:
            params["system"] = system_prompt

        try:
            raw = await self._client.messages.with_raw_response.create(**params)
        except Exception as e:
            decoded = decode_error(e, provider=self.name)
            if decoded is e:
                raise
            raise decoded from e

        response = raw.parse()
        latency_ms = (time.time() - start_time) * 1000

        if not response.content or response.content[0].type != "text":
            raise ResponseFormatError("Expected text response from Claude")

        llm_response = LLMResponse(
            content=response.content[0].text,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=self._model,
            provider=self.name,
            latency_ms=latency_ms,
            finish_reason=response.stop_reason,
            timestamp=datetime.now(timezone.utc),
            rate_limit=parse_rate_limit_headers(raw.headers),
        )

        logger.debug(
            "anthropic_complete_success",
            model=self._model,
            input_tokens=llm_response.input_tokens,
            output_tokens=llm_response.output_tokens,
            latency_ms=latency_ms,
        )

        return llm_response
